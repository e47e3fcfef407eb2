from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.core.auth import allow_admin, require_org, validate_current_token
from shared.core.database import get_lease_db as get_db
from shared.core.schemas import UserToken
from shared.helpers.json_response_helper import success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.lease_templates import lease_templates_crud as crud
from ...schemas.lease_templates.lease_templates_schemas import (
    AssignPropertiesRequest, LeaseTemplateCreate, LeaseTemplateOut, SetDefaultRequest
)

router = APIRouter(
    prefix="/api/lease-templates",
    tags=["lease-templates"],
    dependencies=[Depends(validate_current_token)]
)


def _out(template, property_id=None) -> dict:
    return LeaseTemplateOut.model_validate(crud.template_out(template, property_id)).model_dump(mode="json")


@router.post("/")
def create_lease_template(
    payload: LeaseTemplateCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin),
):
    template = crud.create_template(
        db, payload, org_id=current_user.org_id, created_by=current_user.user_id)
    return success_response(
        data=_out(template),
        message="Lease template created",
        status_code=AppStatusCode.CREATED_SUCCESSFULLY,
    )


@router.get("/property/{property_id}")
def list_property_templates(
    property_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(require_org),
):
    rows = crud.list_templates_for_property(db, property_id, current_user.org_id)
    return success_response(
        data=[LeaseTemplateOut.model_validate(r).model_dump(mode="json") for r in rows])


@router.get("/property/{property_id}/default")
def get_property_default_template(
    property_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(require_org),
):
    template = crud.resolve_default_template(db, property_id, current_user.org_id)
    return success_response(data=_out(template, property_id) if template else None)


@router.post("/set-default")
def set_default_template(
    payload: SetDefaultRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin),
):
    template = crud.set_default(
        db, payload.template_id, payload.property_id, org_id=current_user.org_id)
    return success_response(
        data=_out(template, payload.property_id),
        message="Default template updated",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )


@router.get("/{template_id}")
def get_lease_template(
    template_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(require_org),
):
    return success_response(data=_out(crud.get_template(db, template_id, current_user.org_id)))


@router.post("/{template_id}/properties")
def assign_template_properties(
    template_id: UUID,
    payload: AssignPropertiesRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin),
):
    template = crud.assign_to_properties(
        db, template_id, payload.property_ids, org_id=current_user.org_id)
    return success_response(
        data=_out(template),
        message="Template assigned",
        status_code=AppStatusCode.UPDATED_SUCCESSFULLY,
    )


@router.delete("/{template_id}")
def delete_lease_template(
    template_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(allow_admin),
):
    crud.delete_template(db, template_id, org_id=current_user.org_id)
    return success_response(
        data={"id": str(template_id)},
        message="Lease template deleted",
        status_code=AppStatusCode.DELETED_SUCCESSFULLY,
    )
