from enum import Enum


class LeaseLifecycleStatus(str, Enum):
    draft = "draft"
    template_only = "template_only"
    pending_signature = "pending_signature"
    active = "active"
    declined = "declined"
    terminated = "terminated"


class SignerRole(str, Enum):
    tenant = "tenant"
    landlord = "landlord"


class SignatureStatus(str, Enum):
    pending = "pending"
    signed = "signed"
    declined = "declined"


class RenderMode(str, Enum):
    preview = "preview"
    commit = "commit"


class TerminationReason(str, Enum):
    eviction = "eviction"
    voluntary = "voluntary"
    lease_end = "lease_end"
    mutual_agreement = "mutual_agreement"
    non_renewal = "non_renewal"


class AuditEventType(str, Enum):
    created = "created"
    sent_for_signature = "sent_for_signature"
    signed = "signed"
    declined = "declined"
    executed = "executed"
    terminated = "terminated"
    regenerated = "regenerated"


class ApplicationStatus(str, Enum):
    pending = "pending"
    documents_submitted = "documents_submitted"
    approved = "approved"
    rejected = "rejected"
    complete = "complete"
