from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from shared.core.database import get_lease_db as get_db
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.lease_documents import lease_lifecycle_crud as crud
from ...schemas.lease_documents.lease_documents_schemas import SignWithTokenRequest

# Signing links are mailed to the parties; the token is the credential.
router = APIRouter(
    prefix="/api/sign",
    tags=["lease-signing"],
)


@router.post("/{token}")
def sign_lease(
    token: str,
    payload: SignWithTokenRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    doc = crud.sign_with_token(
        db, token, payload.outcome,
        signer_name=payload.signer_name,
        signer_email=payload.signer_email,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return success_response(
        data={"document_id": str(doc.id), "status": crud.current_status(db, doc).value},
        message="Signature recorded",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )
