import logging
from typing import Iterable, List, Optional
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy import update
from sqlalchemy.orm import Session

from ...core.exceptions import LeaseValidationError, NotFoundError, TemplateNotAssociated
from ...enum.lease_templates_enum import LeaseTemplateKind
from ...models.lease_templates.lease_templates import LeaseTemplate
from ...models.lease_templates.property_lease_templates import PropertyLeaseTemplate
from ...models.property_safe.properties_safe import PropertySafe
from ...schemas.lease_builder.lease_builder_schemas import Customizations
from ...schemas.lease_templates.lease_templates_schemas import LeaseTemplateCreate

logger = logging.getLogger(__name__)


def _ensure_properties(
    db: Session,
    property_ids: Iterable[UUID],
    org_id: Optional[UUID] = None,
) -> None:
    for property_id in property_ids:
        query = db.query(PropertySafe.id).filter(
            PropertySafe.id == property_id, PropertySafe.is_deleted == False)
        if org_id is not None:
            query = query.filter(PropertySafe.org_id == org_id)
        exists = query.first()
        if not exists:
            raise NotFoundError(f"Property {property_id} not found")


def validate_builder_config(config: Optional[dict]) -> dict:
    """A builder template stores a Customizations payload; reject anything else."""
    try:
        parsed = Customizations.model_validate(config or {})
    except ValidationError as e:
        raise LeaseValidationError([
            {"field": "builder_config." + ".".join(str(p) for p in err["loc"]),
             "message": err["msg"]}
            for err in e.errors()
        ])
    return parsed.model_dump(mode="json", exclude_unset=True)


def template_out(template: LeaseTemplate, property_id: Optional[UUID] = None) -> dict:
    is_default = False
    if property_id is not None:
        is_default = any(
            link.is_default for link in template.properties if link.property_id == property_id)
    return {
        "id": template.id,
        "name": template.name,
        "kind": template.kind,
        "builder_config": template.builder_config,
        "pdf_url": template.pdf_url,
        "property_ids": [link.property_id for link in template.properties],
        "is_default": is_default,
        "created_at": template.created_at,
        "updated_at": template.updated_at,
    }


# ----------------------------------------------------
# ✅ Create / read
# ----------------------------------------------------
def create_template(
    db: Session,
    payload: LeaseTemplateCreate,
    org_id: Optional[UUID] = None,
    created_by: Optional[str] = None,
    commit: bool = True,
) -> LeaseTemplate:
    builder_config = None
    if payload.kind == LeaseTemplateKind.builder:
        builder_config = validate_builder_config(payload.builder_config)
    elif not payload.pdf_url:
        raise LeaseValidationError(
            [{"field": "pdf_url", "message": "uploaded_pdf templates require a pdf_url"}])

    property_ids = list(dict.fromkeys(payload.property_ids))
    if payload.is_default and not property_ids:
        raise LeaseValidationError(
            [{"field": "is_default", "message": "a default template must be assigned to a property"}])
    _ensure_properties(db, property_ids, org_id)

    try:
        template = LeaseTemplate(
            org_id=org_id,
            name=payload.name,
            kind=payload.kind.value,
            builder_config=builder_config,
            pdf_url=payload.pdf_url,
            created_by=created_by,
        )
        db.add(template)
        db.flush()
        for property_id in property_ids:
            db.add(PropertyLeaseTemplate(property_id=property_id, template_id=template.id))
        db.flush()
        if payload.is_default:
            for property_id in property_ids:
                _swap_default(db, template.id, property_id)
        if commit:
            db.commit()
            db.refresh(template)
    except Exception:
        db.rollback()
        raise

    logger.info("Lease template %s created (%s)", template.id, template.kind)
    return template


def get_template(db: Session, template_id: UUID, org_id: Optional[UUID] = None) -> LeaseTemplate:
    template = (
        db.query(LeaseTemplate)
        .filter(LeaseTemplate.id == template_id, LeaseTemplate.is_deleted == False)
        .first()
    )
    if not template or (org_id is not None and template.org_id != org_id):
        raise NotFoundError("Lease template not found")
    return template


def list_templates_for_property(
    db: Session,
    property_id: UUID,
    org_id: Optional[UUID] = None,
) -> List[dict]:
    """The property's templates, default first, then by name."""
    query = (
        db.query(LeaseTemplate, PropertyLeaseTemplate.is_default)
        .join(PropertyLeaseTemplate, PropertyLeaseTemplate.template_id == LeaseTemplate.id)
        .filter(PropertyLeaseTemplate.property_id == property_id,
                LeaseTemplate.is_deleted == False)
    )
    if org_id is not None:
        query = query.filter(LeaseTemplate.org_id == org_id)
    rows = (
        query
        .order_by(PropertyLeaseTemplate.is_default.desc(), LeaseTemplate.name)
        .all()
    )
    return [template_out(template, property_id) for template, _ in rows]


def resolve_default_template(
    db: Session,
    property_id: UUID,
    org_id: Optional[UUID] = None,
) -> Optional[LeaseTemplate]:
    query = (
        db.query(LeaseTemplate)
        .join(PropertyLeaseTemplate, PropertyLeaseTemplate.template_id == LeaseTemplate.id)
        .filter(PropertyLeaseTemplate.property_id == property_id,
                PropertyLeaseTemplate.is_default == True,
                LeaseTemplate.is_deleted == False)
    )
    if org_id is not None:
        query = query.filter(LeaseTemplate.org_id == org_id)
    return query.first()


def is_associated(db: Session, template_id: UUID, property_id: UUID) -> bool:
    return db.query(PropertyLeaseTemplate).filter(
        PropertyLeaseTemplate.template_id == template_id,
        PropertyLeaseTemplate.property_id == property_id,
    ).first() is not None


# ----------------------------------------------------
# ✅ Associations and default
# ----------------------------------------------------
def assign_to_properties(
    db: Session,
    template_id: UUID,
    property_ids: List[UUID],
    org_id: Optional[UUID] = None,
) -> LeaseTemplate:
    template = get_template(db, template_id, org_id)
    _ensure_properties(db, property_ids, org_id)
    try:
        for property_id in dict.fromkeys(property_ids):
            if not is_associated(db, template.id, property_id):
                db.add(PropertyLeaseTemplate(property_id=property_id, template_id=template.id))
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(template)
    return template


def _swap_default(db: Session, template_id: UUID, property_id: UUID) -> None:
    # lock the property's links so concurrent swaps serialize
    (
        db.query(PropertyLeaseTemplate)
        .filter(PropertyLeaseTemplate.property_id == property_id)
        .with_for_update()
        .all()
    )
    # clear first so the partial unique index never sees two defaults
    db.execute(
        update(PropertyLeaseTemplate)
        .where(PropertyLeaseTemplate.property_id == property_id,
               PropertyLeaseTemplate.is_default == True,
               PropertyLeaseTemplate.template_id != template_id)
        .values(is_default=False)
        .execution_options(synchronize_session="fetch")
    )
    db.execute(
        update(PropertyLeaseTemplate)
        .where(PropertyLeaseTemplate.property_id == property_id,
               PropertyLeaseTemplate.template_id == template_id)
        .values(is_default=True)
        .execution_options(synchronize_session="fetch")
    )


def set_default(
    db: Session,
    template_id: UUID,
    property_id: UUID,
    org_id: Optional[UUID] = None,
) -> LeaseTemplate:
    template = get_template(db, template_id, org_id)
    if not is_associated(db, template.id, property_id):
        raise TemplateNotAssociated(
            "Template is not associated with this property",
            details={"template_id": str(template_id), "property_id": str(property_id)},
        )

    try:
        _swap_default(db, template.id, property_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Template %s is now the default for property %s", template_id, property_id)
    db.refresh(template)
    return template


def delete_template(db: Session, template_id: UUID, org_id: Optional[UUID] = None) -> None:
    """Soft delete. Properties that used it as default are left without one."""
    template = get_template(db, template_id, org_id)
    try:
        for link in list(template.properties):
            if link.is_default:
                logger.info("Property %s no longer has a default template", link.property_id)
            db.delete(link)
        template.is_deleted = True
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Lease template %s deleted", template_id)
