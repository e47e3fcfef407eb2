from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from shared.core.auth import require_org, validate_current_token
from shared.core.database import get_lease_db as get_db
from shared.core.schemas import UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.lease_builder import lease_builder_crud as crud
from ...crud.lease_builder.lease_renderer import BaseLeaseRenderer, get_lease_renderer
from ...schemas.lease_builder.lease_builder_schemas import LeaseBuilderRequest, LeaseGenerateRequest
from ...schemas.lease_documents.lease_documents_schemas import LeaseDocumentRef

router = APIRouter(
    prefix="/api/lease-builder",
    tags=["lease-builder"],
    dependencies=[Depends(validate_current_token)]
)


@router.post("/preview", response_class=HTMLResponse)
def preview_lease(
    payload: LeaseBuilderRequest,
    db: Session = Depends(get_db),
    renderer: BaseLeaseRenderer = Depends(get_lease_renderer),
    current_user: UserToken = Depends(require_org),
):
    artifact, resolved = crud.preview(db, payload, renderer, org_id=current_user.org_id)
    headers = {"X-Document-Hash": artifact.document_hash}
    if resolved.warnings:
        headers["X-Lease-Warnings"] = ",".join(w.code.value for w in resolved.warnings)
    return HTMLResponse(content=artifact.markup, media_type=artifact.content_type, headers=headers)


@router.post("/generate")
def generate_lease(
    payload: LeaseGenerateRequest,
    db: Session = Depends(get_db),
    renderer: BaseLeaseRenderer = Depends(get_lease_renderer),
    current_user: UserToken = Depends(require_org),
):
    doc, status, resolved = crud.generate(
        db, payload, renderer,
        org_id=current_user.org_id,
        created_by=current_user.user_id,
    )
    ref = LeaseDocumentRef(
        id=doc.id,
        artifact_ref=doc.artifact_ref,
        document_hash=doc.document_hash,
        status=status,
    )
    return success_response(
        data={
            "document": ref.model_dump(mode="json"),
            "warnings": [w.model_dump(mode="json") for w in resolved.warnings],
        },
        message="Lease generated successfully",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY,
    )
