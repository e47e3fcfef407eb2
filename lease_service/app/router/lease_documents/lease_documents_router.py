from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin, require_org, validate_current_token
from shared.core.database import get_lease_db as get_db
from shared.core.schemas import UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.lease_builder import lease_builder_crud as builder_crud
from ...crud.lease_builder.lease_renderer import BaseLeaseRenderer, get_lease_renderer
from ...crud.lease_documents import lease_lifecycle_crud as crud
from ...enum.lease_documents_enum import LeaseLifecycleStatus
from ...schemas.lease_documents.lease_documents_schemas import (
    AuditEventOut, LeaseDocumentOut, LeaseDocumentRef, SignatureRecordRequest, TerminateRequest
)

router = APIRouter(
    prefix="/api/lease-documents",
    tags=["lease-documents"],
    dependencies=[Depends(validate_current_token)]
)


def _document_payload(db: Session, doc) -> dict:
    return LeaseDocumentOut.model_validate(crud.document_out(db, doc)).model_dump(mode="json")


@router.get("/property/{property_id}")
def list_property_documents(
    property_id: UUID,
    status: Optional[LeaseLifecycleStatus] = Query(None),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(require_org),
):
    docs = crud.list_documents(db, property_id, status, org_id=current_user.org_id)
    return success_response(
        data=[LeaseDocumentOut.model_validate(d).model_dump(mode="json") for d in docs])


@router.get("/{document_id}")
def get_lease_document(
    document_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(require_org),
):
    doc = crud.get_document(db, document_id, current_user.org_id)
    return success_response(data=_document_payload(db, doc))


@router.get("/{document_id}/html", response_class=HTMLResponse)
def get_lease_document_html(
    document_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(require_org),
):
    doc = crud.get_document(db, document_id, current_user.org_id)
    return HTMLResponse(content=doc.rendered_html,
                        headers={"X-Document-Hash": doc.document_hash})


@router.get("/{document_id}/audit")
def get_lease_document_audit(
    document_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(require_org),
):
    events = crud.list_audit_events(db, document_id, current_user.org_id)
    return success_response(
        data=[AuditEventOut.model_validate(e).model_dump(mode="json") for e in events])


@router.post("/{document_id}/signatures")
def record_lease_signature(
    document_id: UUID,
    payload: SignatureRecordRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(require_org),
):
    doc = crud.get_document(db, document_id, current_user.org_id)
    crud.authorize_signer(db, doc, payload.role, current_user)
    doc = crud.record_signature(
        db, doc.id, payload.role, payload.outcome,
        signer_name=payload.signer_name or current_user.name,
        signer_email=payload.signer_email,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        org_id=current_user.org_id,
    )
    return success_response(
        data=_document_payload(db, doc),
        message="Signature recorded",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )


@router.post("/{document_id}/terminate")
def terminate_lease_document(
    document_id: UUID,
    payload: TerminateRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin),
):
    doc = crud.terminate(
        db, document_id, payload.reason,
        termination_date=payload.termination_date,
        notes=payload.notes,
        actor=current_user.user_id,
        org_id=current_user.org_id,
    )
    return success_response(
        data=_document_payload(db, doc),
        message="Lease terminated",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )


@router.post("/{document_id}/regenerate")
def regenerate_lease_document(
    document_id: UUID,
    db: Session = Depends(get_db),
    renderer: BaseLeaseRenderer = Depends(get_lease_renderer),
    current_user: UserToken = Depends(allow_admin),
):
    doc, status, _ = builder_crud.regenerate(
        db, document_id, renderer,
        created_by=current_user.user_id,
        org_id=current_user.org_id,
    )
    ref = LeaseDocumentRef(id=doc.id, artifact_ref=doc.artifact_ref,
                           document_hash=doc.document_hash, status=status)
    return success_response(
        data={"document": ref.model_dump(mode="json"), "supersedes": str(document_id)},
        message="Lease regenerated",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY,
    )
