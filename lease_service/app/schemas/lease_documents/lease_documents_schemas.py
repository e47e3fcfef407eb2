from datetime import date, datetime
from typing import List, Optional
from uuid import UUID
from pydantic import Field

from ...enum.lease_documents_enum import (
    LeaseLifecycleStatus, SignatureStatus, SignerRole, TerminationReason
)
from ..lease_builder.lease_builder_schemas import CamelModel


class SignatureRequestOut(CamelModel):
    role: SignerRole
    status: SignatureStatus
    recipient_name: Optional[str] = None
    recipient_email: Optional[str] = None
    signed_at: Optional[datetime] = None
    declined_at: Optional[datetime] = None
    signer_name: Optional[str] = None
    expires_at: Optional[datetime] = None

    model_config = {"from_attributes": True, "populate_by_name": True}


class LeaseDocumentRef(CamelModel):
    id: UUID
    artifact_ref: str
    document_hash: str
    status: LeaseLifecycleStatus


class LeaseDocumentOut(CamelModel):
    id: UUID
    property_id: UUID
    unit_id: Optional[UUID] = None
    tenant_id: Optional[UUID] = None
    template_id: Optional[UUID] = None
    jurisdiction: Optional[str] = None
    artifact_ref: str
    document_hash: str
    status: LeaseLifecycleStatus
    termination_reason: Optional[TerminationReason] = None
    termination_date: Optional[date] = None
    superseded_by_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    signature_requests: List[SignatureRequestOut] = []


class AuditEventOut(CamelModel):
    id: UUID
    event_type: str
    actor: str
    actor_role: str
    details: Optional[str] = None
    document_hash: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True, "populate_by_name": True}


class SignatureRecordRequest(CamelModel):
    role: SignerRole
    outcome: SignatureStatus
    signer_name: Optional[str] = None
    signer_email: Optional[str] = None


class SignWithTokenRequest(CamelModel):
    outcome: SignatureStatus = SignatureStatus.signed
    signer_name: Optional[str] = Field(None, max_length=200)
    signer_email: Optional[str] = Field(None, max_length=200)


class TerminateRequest(CamelModel):
    reason: TerminationReason
    termination_date: Optional[date] = None
    notes: Optional[str] = None
