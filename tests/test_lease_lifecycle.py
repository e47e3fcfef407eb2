import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import event
from sqlalchemy.dialects import postgresql

from lease_service.app.core.exceptions import (
    LifecycleTransitionError, NotFoundError, SignatureStateConflict, SignerNotAuthorized,
    SigningLinkExpired
)
from lease_service.app.crud.lease_builder import lease_builder_crud
from lease_service.app.crud.lease_documents import lease_lifecycle_crud as lifecycle
from lease_service.app.enum.lease_documents_enum import (
    ApplicationStatus, LeaseLifecycleStatus, SignatureStatus, SignerRole, TerminationReason
)
from lease_service.app.models.lease_documents.lease_audit_events import LeaseAuditEvent
from lease_service.app.models.lease_documents.lease_documents import LeaseDocument
from lease_service.app.models.lease_documents.signature_requests import SignatureRequest


@pytest.fixture
def document(db, lease_request, renderer):
    doc, status, _ = lease_builder_crud.generate(db, lease_request(), renderer, created_by="admin-1")
    assert status == LeaseLifecycleStatus.pending_signature
    return doc


def _status(db, doc):
    return lifecycle.current_status(db, doc)


def _event_types(db, doc):
    return [e.event_type for e in lifecycle.list_audit_events(db, doc.id)]


def test_generate_creates_both_requests(db, document):
    requests = lifecycle.get_signature_requests(db, document.id)
    assert sorted(r.role for r in requests) == ["landlord", "tenant"]
    assert all(r.status == "pending" for r in requests)
    assert all(len(r.token) == 48 for r in requests)
    assert sorted(_event_types(db, document)) == ["created", "sent_for_signature"]


def test_without_tenant_document_is_template_only(db, lease_request, renderer):
    doc, status, _ = lease_builder_crud.generate(db, lease_request(tenant_id=None), renderer)
    assert status == LeaseLifecycleStatus.template_only
    assert _status(db, doc) == LeaseLifecycleStatus.template_only
    assert lifecycle.get_signature_requests(db, doc.id) == []


def test_document_becomes_active_only_when_all_signed(db, document):
    lifecycle.record_signature(db, document.id, SignerRole.tenant, SignatureStatus.signed)
    assert _status(db, document) == LeaseLifecycleStatus.pending_signature

    lifecycle.record_signature(db, document.id, SignerRole.landlord, SignatureStatus.signed)
    assert _status(db, document) == LeaseLifecycleStatus.active
    assert "executed" in _event_types(db, document)


def test_repeated_signature_is_idempotent(db, document):
    lifecycle.record_signature(db, document.id, SignerRole.tenant, SignatureStatus.signed)
    first = db.query(SignatureRequest).filter_by(document_id=document.id, role="tenant").one().signed_at

    lifecycle.record_signature(db, document.id, SignerRole.tenant, SignatureStatus.signed)
    again = db.query(SignatureRequest).filter_by(document_id=document.id, role="tenant").one()

    assert again.signed_at == first
    assert _event_types(db, document).count("signed") == 1


def test_signed_request_cannot_be_declined(db, document):
    lifecycle.record_signature(db, document.id, SignerRole.tenant, SignatureStatus.signed)
    with pytest.raises(SignatureStateConflict):
        lifecycle.record_signature(db, document.id, SignerRole.tenant, SignatureStatus.declined)


def test_decline_blocks_further_signing(db, document):
    lifecycle.record_signature(db, document.id, SignerRole.tenant, SignatureStatus.declined)
    assert _status(db, document) == LeaseLifecycleStatus.declined

    with pytest.raises(SignatureStateConflict):
        lifecycle.record_signature(db, document.id, SignerRole.landlord, SignatureStatus.signed)


def test_pending_is_not_an_outcome(db, document):
    with pytest.raises(SignatureStateConflict):
        lifecycle.record_signature(db, document.id, SignerRole.tenant, SignatureStatus.pending)


def test_pending_after_execution_keeps_lease_active(db, document):
    lifecycle.record_signature(db, document.id, SignerRole.tenant, SignatureStatus.signed)
    lifecycle.record_signature(db, document.id, SignerRole.landlord, SignatureStatus.signed)

    with pytest.raises(SignatureStateConflict):
        lifecycle.record_signature(db, document.id, SignerRole.tenant, SignatureStatus.pending)

    assert _status(db, document) == LeaseLifecycleStatus.active
    tenant = db.query(SignatureRequest).filter_by(document_id=document.id, role="tenant").one()
    assert tenant.status == "signed"


def test_signing_locks_every_request_of_the_document(db, document):
    locked = []

    def capture(state):
        if state.is_select and getattr(state.statement, "_for_update_arg", None) is not None:
            locked.append(str(state.statement.compile(dialect=postgresql.dialect())))

    event.listen(db, "do_orm_execute", capture)
    try:
        lifecycle.record_signature(db, document.id, SignerRole.tenant, SignatureStatus.signed)
    finally:
        event.remove(db, "do_orm_execute", capture)

    assert len(locked) == 1
    assert "FROM signature_requests" in locked[0]
    assert "FOR UPDATE" in locked[0]
    assert "signature_requests.role =" not in locked[0]


def test_unknown_document(db, seed):
    with pytest.raises(NotFoundError):
        lifecycle.record_signature(db, seed["property_id"], SignerRole.tenant, SignatureStatus.signed)


def test_template_only_document_has_nothing_to_sign(db, lease_request, renderer):
    doc, _, _ = lease_builder_crud.generate(db, lease_request(tenant_id=None), renderer)
    with pytest.raises(SignatureStateConflict):
        lifecycle.record_signature(db, doc.id, SignerRole.tenant, SignatureStatus.signed)


def test_tenant_first_ordering(db, document, monkeypatch):
    monkeypatch.setattr(lifecycle.settings, "ENFORCE_TENANT_FIRST_SIGNING", True)
    with pytest.raises(SignatureStateConflict):
        lifecycle.record_signature(db, document.id, SignerRole.landlord, SignatureStatus.signed)

    lifecycle.record_signature(db, document.id, SignerRole.tenant, SignatureStatus.signed)
    lifecycle.record_signature(db, document.id, SignerRole.landlord, SignatureStatus.signed)
    assert _status(db, document) == LeaseLifecycleStatus.active


def test_sign_with_token_records_signer(db, document):
    request = db.query(SignatureRequest).filter_by(document_id=document.id, role="tenant").one()

    lifecycle.sign_with_token(db, request.token, SignatureStatus.signed,
                              ip_address="10.0.0.1", user_agent="pytest")

    db.refresh(request)
    assert request.status == "signed"
    assert request.signer_name == "Jamie Renter"
    assert request.signer_ip == "10.0.0.1"


def test_expired_signing_link(db, document):
    request = db.query(SignatureRequest).filter_by(document_id=document.id, role="tenant").one()
    request.expires_at = datetime.now(timezone.utc) - timedelta(minutes=1)
    db.commit()

    with pytest.raises(SigningLinkExpired):
        lifecycle.sign_with_token(db, request.token, SignatureStatus.signed)


def test_unknown_signing_link(db, seed):
    with pytest.raises(NotFoundError):
        lifecycle.sign_with_token(db, "nope", SignatureStatus.signed)


def test_terminate_pending_document(db, document):
    lifecycle.terminate(db, document.id, TerminationReason.mutual_agreement, notes="Moved away")

    assert _status(db, document) == LeaseLifecycleStatus.terminated
    assert document.termination_reason == "mutual_agreement"
    assert _event_types(db, document)[-1] == "terminated"
    with pytest.raises(SignatureStateConflict):
        lifecycle.record_signature(db, document.id, SignerRole.tenant, SignatureStatus.signed)


def test_terminate_is_one_way(db, document):
    lifecycle.terminate(db, document.id, TerminationReason.eviction)
    with pytest.raises(LifecycleTransitionError):
        lifecycle.terminate(db, document.id, TerminationReason.voluntary)


def test_declined_document_cannot_be_terminated(db, document):
    lifecycle.record_signature(db, document.id, SignerRole.tenant, SignatureStatus.declined)
    with pytest.raises(LifecycleTransitionError):
        lifecycle.terminate(db, document.id, TerminationReason.lease_end)


def test_regenerate_supersedes_declined_document(db, document, renderer):
    lifecycle.record_signature(db, document.id, SignerRole.tenant, SignatureStatus.declined)

    new_doc, status, _ = lease_builder_crud.regenerate(db, document.id, renderer, created_by="admin-1")

    db.refresh(document)
    assert status == LeaseLifecycleStatus.pending_signature
    assert document.superseded_by_id == new_doc.id
    assert new_doc.document_hash == document.document_hash
    assert "regenerated" in _event_types(db, document)
    with pytest.raises(LifecycleTransitionError):
        lease_builder_crud.regenerate(db, document.id, renderer)
    with pytest.raises(SignatureStateConflict):
        lifecycle.record_signature(db, document.id, SignerRole.landlord, SignatureStatus.signed)


def test_active_lease_cannot_be_regenerated(db, document, renderer, seed):
    lifecycle.record_signature(db, document.id, SignerRole.tenant, SignatureStatus.signed)
    lifecycle.record_signature(db, document.id, SignerRole.landlord, SignatureStatus.signed)

    with pytest.raises(LifecycleTransitionError):
        lease_builder_crud.regenerate(db, document.id, renderer)

    db.refresh(document)
    assert document.superseded_by_id is None
    assert db.query(LeaseDocument).count() == 1
    statuses = [d["status"] for d in lifecycle.list_documents(db, seed["property_id"])]
    assert statuses == [LeaseLifecycleStatus.active]


def test_terminated_lease_cannot_be_regenerated(db, document, renderer):
    lifecycle.terminate(db, document.id, TerminationReason.voluntary)
    with pytest.raises(LifecycleTransitionError):
        lease_builder_crud.regenerate(db, document.id, renderer)


def test_pending_document_can_be_regenerated(db, document, renderer):
    new_doc, status, _ = lease_builder_crud.regenerate(db, document.id, renderer)
    db.refresh(document)
    assert status == LeaseLifecycleStatus.pending_signature
    assert document.superseded_by_id == new_doc.id


def test_documents_are_scoped_to_their_organization(db, document, seed):
    other_org = uuid.uuid4()

    assert lifecycle.get_document(db, document.id, document.org_id).id == document.id
    with pytest.raises(NotFoundError):
        lifecycle.get_document(db, document.id, other_org)
    with pytest.raises(NotFoundError):
        lifecycle.record_signature(db, document.id, SignerRole.landlord, SignatureStatus.signed,
                                   org_id=other_org)
    with pytest.raises(NotFoundError):
        lifecycle.terminate(db, document.id, TerminationReason.eviction, org_id=other_org)
    with pytest.raises(NotFoundError):
        lifecycle.list_audit_events(db, document.id, other_org)

    assert lifecycle.list_documents(db, seed["property_id"], org_id=other_org) == []
    assert _status(db, document) == LeaseLifecycleStatus.pending_signature


def test_generation_is_scoped_to_the_property_organization(db, lease_request, renderer):
    with pytest.raises(NotFoundError):
        lease_builder_crud.generate(db, lease_request(), renderer, org_id=uuid.uuid4())
    assert db.query(LeaseDocument).count() == 0


def test_authorize_signer(db, document, users):
    lifecycle.authorize_signer(db, document, SignerRole.landlord, users["admin"])
    lifecycle.authorize_signer(db, document, SignerRole.tenant, users["tenant"])

    refused = [
        (SignerRole.tenant, users["admin"]),
        (SignerRole.landlord, users["tenant"]),
        (SignerRole.tenant, users["stranger_tenant"]),
        (SignerRole.landlord, users["other_org_admin"]),
        (SignerRole.landlord, users["outsider"]),
    ]
    for role, user in refused:
        with pytest.raises(SignerNotAuthorized):
            lifecycle.authorize_signer(db, document, role, user)


def test_list_documents_filters_on_derived_status(db, document, lease_request, renderer, seed):
    lease_builder_crud.generate(db, lease_request(tenant_id=None), renderer)

    pending = lifecycle.list_documents(db, seed["property_id"], LeaseLifecycleStatus.pending_signature)
    everything = lifecycle.list_documents(db, seed["property_id"])

    assert [d["id"] for d in pending] == [document.id]
    assert len(everything) == 2
    assert db.query(LeaseAuditEvent).count() == 3


def test_each_generate_creates_a_new_document(db, lease_request, renderer):
    request = lease_request()
    first, _, _ = lease_builder_crud.generate(db, request, renderer)
    second, _, _ = lease_builder_crud.generate(db, request, renderer)
    assert first.id != second.id
    assert db.query(LeaseDocument).count() == 2


@pytest.mark.parametrize("current, target", [
    (ApplicationStatus.pending, ApplicationStatus.documents_submitted),
    (ApplicationStatus.documents_submitted, ApplicationStatus.approved),
    (ApplicationStatus.approved, ApplicationStatus.complete),
    (ApplicationStatus.complete, ApplicationStatus.complete),
])
def test_application_moves_forward(current, target):
    assert lifecycle.check_application_transition(current, target) == target


@pytest.mark.parametrize("current, target", [
    (ApplicationStatus.documents_submitted, ApplicationStatus.pending),
    (ApplicationStatus.complete, ApplicationStatus.approved),
    (ApplicationStatus.rejected, ApplicationStatus.approved),
])
def test_application_regression_is_rejected(current, target):
    with pytest.raises(LifecycleTransitionError):
        lifecycle.check_application_transition(current, target)


def test_generate_from_rejected_application_is_refused(db, lease_request, renderer):
    with pytest.raises(LifecycleTransitionError):
        lease_builder_crud.generate(
            db, lease_request(application_status=ApplicationStatus.rejected), renderer)
    assert db.query(LeaseDocument).count() == 0
