import logging
import secrets
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.core.schemas import UserToken
from ...core.exceptions import (
    LifecycleTransitionError, NotFoundError, SignatureStateConflict, SignerNotAuthorized,
    SigningLinkExpired
)
from ...enum.lease_documents_enum import (
    ApplicationStatus, AuditEventType, LeaseLifecycleStatus, SignatureStatus,
    SignerRole, TerminationReason
)
from ...models.lease_documents.lease_audit_events import LeaseAuditEvent
from ...models.lease_documents.lease_documents import LeaseDocument
from ...models.lease_documents.signature_requests import SignatureRequest
from ...models.property_safe.tenants_safe import TenantSafe
from ...schemas.lease_documents.lease_documents_schemas import SignatureRequestOut

logger = logging.getLogger(__name__)

TERMINABLE_STATUSES = (LeaseLifecycleStatus.active, LeaseLifecycleStatus.pending_signature)

APPLICATION_TRANSITIONS: Dict[ApplicationStatus, tuple] = {
    ApplicationStatus.pending: (ApplicationStatus.documents_submitted, ApplicationStatus.rejected),
    ApplicationStatus.documents_submitted: (
        ApplicationStatus.approved, ApplicationStatus.rejected, ApplicationStatus.complete),
    ApplicationStatus.approved: (ApplicationStatus.complete,),
    ApplicationStatus.rejected: (),
    ApplicationStatus.complete: (),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # sqlite hands timezone columns back naive
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def new_signing_token() -> str:
    return secrets.token_hex(24)


# ----------------------------------------------------
# ✅ Status derivation
# ----------------------------------------------------
def derive_document_status(
    doc: LeaseDocument,
    requests: Iterable[SignatureRequest],
) -> LeaseLifecycleStatus:
    """Overall status as a pure function of termination and the signature requests."""
    if doc.terminated_at is not None:
        return LeaseLifecycleStatus.terminated

    statuses = [r.status for r in requests]
    if not statuses:
        return LeaseLifecycleStatus.template_only
    if SignatureStatus.declined.value in statuses:
        return LeaseLifecycleStatus.declined
    if all(s == SignatureStatus.signed.value for s in statuses):
        return LeaseLifecycleStatus.active
    return LeaseLifecycleStatus.pending_signature


def get_signature_requests(db: Session, document_id: UUID) -> List[SignatureRequest]:
    return (
        db.query(SignatureRequest)
        .filter(SignatureRequest.document_id == document_id)
        .order_by(SignatureRequest.role)
        .all()
    )


def current_status(db: Session, doc: LeaseDocument) -> LeaseLifecycleStatus:
    return derive_document_status(doc, get_signature_requests(db, doc.id))


def add_audit_event(
    db: Session,
    doc: LeaseDocument,
    event_type: AuditEventType,
    actor: Optional[str] = None,
    actor_role: str = "system",
    details: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> LeaseAuditEvent:
    event = LeaseAuditEvent(
        document_id=doc.id,
        event_type=event_type.value,
        actor=actor or "system",
        actor_role=actor_role,
        details=details,
        document_hash=doc.document_hash,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.add(event)
    return event


# ----------------------------------------------------
# ✅ Initialization on commit
# ----------------------------------------------------
def initialize_lifecycle(
    db: Session,
    doc: LeaseDocument,
    tenant_name: Optional[str] = None,
    tenant_email: Optional[str] = None,
    landlord_name: Optional[str] = None,
    landlord_email: Optional[str] = None,
    actor: Optional[str] = None,
) -> LeaseLifecycleStatus:
    """
    Give a freshly committed document its first lifecycle state.

    With a tenant bound, one pending request per role is created and the
    document enters pending_signature. Without one it stays template_only.
    Caller owns the transaction.
    """
    add_audit_event(db, doc, AuditEventType.created, actor=actor, actor_role="landlord")

    if doc.tenant_id is None:
        logger.info("Lease document %s committed as template_only", doc.id)
        return LeaseLifecycleStatus.template_only

    expires_at = _utcnow() + timedelta(days=settings.SIGNING_LINK_EXPIRE_DAYS)
    recipients = {
        SignerRole.tenant: (tenant_name, tenant_email),
        SignerRole.landlord: (landlord_name, landlord_email),
    }
    for role, (name, email) in recipients.items():
        db.add(SignatureRequest(
            document_id=doc.id,
            role=role.value,
            status=SignatureStatus.pending.value,
            token=new_signing_token(),
            expires_at=expires_at,
            recipient_name=name,
            recipient_email=email,
        ))

    add_audit_event(
        db, doc, AuditEventType.sent_for_signature, actor=actor, actor_role="landlord",
        details=f"Signature requested from {tenant_email or tenant_name or 'tenant'}",
    )
    db.flush()
    logger.info("Lease document %s sent for signature", doc.id)
    return LeaseLifecycleStatus.pending_signature


# ----------------------------------------------------
# ✅ Signatures
# ----------------------------------------------------
def get_document(db: Session, document_id: UUID, org_id: Optional[UUID] = None) -> LeaseDocument:
    """Fetch a document; with ``org_id`` another organization's document reads as missing."""
    doc = db.query(LeaseDocument).filter(LeaseDocument.id == document_id).first()
    if not doc:
        raise NotFoundError("Lease document not found")
    if org_id is not None and doc.org_id != org_id:
        raise NotFoundError("Lease document not found")
    return doc


def authorize_signer(db: Session, doc: LeaseDocument, role: SignerRole, user: UserToken) -> None:
    """
    Who may record a role's outcome on the authenticated route.

    The landlord role belongs to an organization account of the owning org;
    the tenant role to the tenant account bound to the document. Anyone else
    signs through the emailed link.
    """
    role = SignerRole(role)
    account_type = (user.account_type or "").lower()

    if role == SignerRole.landlord:
        if account_type == "organization" and user.org_id == doc.org_id:
            return
    elif account_type == "tenant" and doc.tenant_id is not None:
        tenant = db.query(TenantSafe).filter(TenantSafe.id == doc.tenant_id).first()
        if tenant is not None and tenant.user_id is not None \
                and str(tenant.user_id) == str(user.user_id):
            return

    raise SignerNotAuthorized(f"Not permitted to sign as {role.value} on this document")


def record_signature(
    db: Session,
    document_id: UUID,
    role: SignerRole,
    outcome: SignatureStatus,
    signer_name: Optional[str] = None,
    signer_email: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    org_id: Optional[UUID] = None,
) -> LeaseDocument:
    """
    Apply one role's outcome.

    Repeating the current outcome is a no-op that keeps the first timestamp.
    A signed request never changes again and a declined document accepts
    no further progress.
    """
    role = SignerRole(role)
    outcome = SignatureStatus(outcome)
    if outcome == SignatureStatus.pending:
        raise SignatureStateConflict("A signature outcome must be signed or declined")

    doc = get_document(db, document_id, org_id)
    if doc.terminated_at is not None:
        raise SignatureStateConflict("Lease document has been terminated")
    if doc.superseded_by_id is not None:
        raise SignatureStateConflict("Lease document has been superseded by a regenerated version")

    # lock the whole request set so concurrent signings of one document serialize
    requests = (
        db.query(SignatureRequest)
        .filter(SignatureRequest.document_id == doc.id)
        .order_by(SignatureRequest.role)
        .populate_existing()
        .with_for_update()
        .all()
    )
    request = next((r for r in requests if r.role == role.value), None)
    if request is None:
        raise SignatureStateConflict(
            f"No {role.value} signature request exists for this document")

    if request.status == outcome.value:
        return doc

    if derive_document_status(doc, requests) == LeaseLifecycleStatus.declined:
        raise SignatureStateConflict(
            "Lease document was declined; it must be regenerated before signing")
    if request.status != SignatureStatus.pending.value:
        raise SignatureStateConflict(
            f"The {role.value} signature is already {request.status}")

    if (settings.ENFORCE_TENANT_FIRST_SIGNING and role == SignerRole.landlord
            and outcome == SignatureStatus.signed):
        tenant_request = next((r for r in requests if r.role == SignerRole.tenant.value), None)
        if tenant_request is not None and tenant_request.status != SignatureStatus.signed.value:
            raise SignatureStateConflict("The tenant must sign before the landlord")

    now = _utcnow()
    try:
        request.status = outcome.value
        request.signer_name = signer_name
        request.signer_email = signer_email
        request.signer_ip = ip_address
        request.signer_user_agent = user_agent
        if outcome == SignatureStatus.signed:
            request.signed_at = now
            event_type = AuditEventType.signed
        else:
            request.declined_at = now
            event_type = AuditEventType.declined

        add_audit_event(
            db, doc, event_type, actor=signer_email or signer_name, actor_role=role.value,
            ip_address=ip_address, user_agent=user_agent,
        )
        db.flush()

        if derive_document_status(doc, requests) == LeaseLifecycleStatus.active:
            add_audit_event(db, doc, AuditEventType.executed,
                            details="All parties have signed")
            logger.info("Lease document %s fully executed", doc.id)

        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Lease document %s: %s %s", doc.id, role.value, outcome.value)
    db.refresh(doc)
    return doc


def get_request_by_token(db: Session, token: str) -> SignatureRequest:
    request = db.query(SignatureRequest).filter(SignatureRequest.token == token).first()
    if request is None:
        raise NotFoundError("Signing link not found")
    return request


def sign_with_token(
    db: Session,
    token: str,
    outcome: SignatureStatus,
    signer_name: Optional[str] = None,
    signer_email: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> LeaseDocument:
    request = get_request_by_token(db, token)
    expires_at = _as_utc(request.expires_at)
    if expires_at is not None and expires_at < _utcnow():
        raise SigningLinkExpired("Signing link has expired")

    return record_signature(
        db,
        request.document_id,
        SignerRole(request.role),
        outcome,
        signer_name=signer_name or request.recipient_name,
        signer_email=signer_email or request.recipient_email,
        ip_address=ip_address,
        user_agent=user_agent,
    )


# ----------------------------------------------------
# ✅ Termination
# ----------------------------------------------------
def terminate(
    db: Session,
    document_id: UUID,
    reason: TerminationReason,
    termination_date: Optional[date] = None,
    notes: Optional[str] = None,
    actor: Optional[str] = None,
    org_id: Optional[UUID] = None,
) -> LeaseDocument:
    doc = get_document(db, document_id, org_id)
    status = current_status(db, doc)
    if status not in TERMINABLE_STATUSES:
        raise LifecycleTransitionError(
            f"A lease in status '{status.value}' cannot be terminated")

    reason = TerminationReason(reason)
    try:
        doc.terminated_at = _utcnow()
        doc.termination_reason = reason.value
        doc.termination_date = termination_date or date.today()
        doc.termination_notes = notes
        add_audit_event(db, doc, AuditEventType.terminated, actor=actor,
                        actor_role="landlord", details=f"Reason: {reason.value}")
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Lease document %s terminated (%s)", doc.id, reason.value)
    db.refresh(doc)
    return doc


# ----------------------------------------------------
# ✅ Read paths
# ----------------------------------------------------
def document_out(db: Session, doc: LeaseDocument) -> dict:
    requests = get_signature_requests(db, doc.id)
    return {
        "id": doc.id,
        "property_id": doc.property_id,
        "unit_id": doc.unit_id,
        "tenant_id": doc.tenant_id,
        "template_id": doc.template_id,
        "jurisdiction": doc.jurisdiction,
        "artifact_ref": doc.artifact_ref,
        "document_hash": doc.document_hash,
        "status": derive_document_status(doc, requests),
        "termination_reason": doc.termination_reason,
        "termination_date": doc.termination_date,
        "superseded_by_id": doc.superseded_by_id,
        "created_at": doc.created_at,
        "updated_at": doc.updated_at,
        "signature_requests": [SignatureRequestOut.model_validate(r) for r in requests],
    }


def list_documents(
    db: Session,
    property_id: UUID,
    status: Optional[LeaseLifecycleStatus] = None,
    org_id: Optional[UUID] = None,
) -> List[dict]:
    query = db.query(LeaseDocument).filter(LeaseDocument.property_id == property_id)
    if org_id is not None:
        query = query.filter(LeaseDocument.org_id == org_id)
    docs = (
        query
        .order_by(LeaseDocument.created_at.desc())
        .all()
    )
    results = [document_out(db, doc) for doc in docs]
    if status is not None:
        results = [r for r in results if r["status"] == status]
    return results


def list_audit_events(
    db: Session,
    document_id: UUID,
    org_id: Optional[UUID] = None,
) -> List[LeaseAuditEvent]:
    get_document(db, document_id, org_id)
    return (
        db.query(LeaseAuditEvent)
        .filter(LeaseAuditEvent.document_id == document_id)
        .order_by(LeaseAuditEvent.created_at)
        .all()
    )


# ----------------------------------------------------
# ✅ Upstream application status
# ----------------------------------------------------
def check_application_transition(
    current: ApplicationStatus,
    target: ApplicationStatus,
) -> ApplicationStatus:
    """Forward-only; staying put is allowed, regressions are not."""
    current = ApplicationStatus(current)
    target = ApplicationStatus(target)
    if current == target:
        return target
    if target not in APPLICATION_TRANSITIONS[current]:
        raise LifecycleTransitionError(
            f"Application status cannot move from '{current.value}' to '{target.value}'")
    return target
