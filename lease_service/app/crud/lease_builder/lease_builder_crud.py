"""
Preview and generate pipelines.

Both run the same resolve -> derive -> render sequence so a preview and a
committed document built from the same input carry the same markup. Generate
additionally persists the document and initializes its lifecycle in a single
transaction.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from ...core.exceptions import (
    LeaseValidationError, LifecycleTransitionError, NotFoundError, TemplateNotAssociated
)
from ...enum.lease_documents_enum import (
    ApplicationStatus, AuditEventType, LeaseLifecycleStatus, RenderMode
)
from ...enum.lease_templates_enum import LeaseTemplateKind
from ...models.lease_documents.lease_documents import LeaseDocument
from ...models.lease_templates.lease_templates import LeaseTemplate
from ...models.property_safe.properties_safe import PropertySafe
from ...models.property_safe.tenants_safe import TenantSafe
from ...models.property_safe.units_safe import UnitSafe
from ...schemas.lease_builder.lease_builder_schemas import (
    Customizations, LeaseBuilderRequest, LeaseGenerateRequest
)
from ...schemas.lease_builder.lease_model_schemas import (
    PartyInfo, PremisesInfo, RenderedArtifact, ResolvedLeaseModel
)
from ...schemas.lease_templates.lease_templates_schemas import LeaseTemplateCreate
from ..lease_documents import lease_lifecycle_crud as lifecycle
from ..lease_templates import lease_templates_crud as templates
from . import derivation_engine, disclosure_resolver
from .lease_renderer import BaseLeaseRenderer

logger = logging.getLogger(__name__)

DEFAULT_UNIT_NAME = "Unit"
LEAD_PAINT_CUTOFF_YEAR = 1978
REGENERABLE_STATUSES = (
    LeaseLifecycleStatus.declined,
    LeaseLifecycleStatus.pending_signature,
    LeaseLifecycleStatus.template_only,
)


@dataclass
class LeaseBuildContext:
    resolved: ResolvedLeaseModel
    property: PropertySafe
    unit: Optional[UnitSafe]
    tenant: Optional[TenantSafe]
    template: Optional[LeaseTemplate]


# ----------------------------------------------------
# ✅ Lookups
# ----------------------------------------------------
def _get_property(db: Session, property_id: UUID, org_id: Optional[UUID] = None) -> PropertySafe:
    prop = (
        db.query(PropertySafe)
        .filter(PropertySafe.id == property_id, PropertySafe.is_deleted == False)
        .first()
    )
    if not prop or (org_id is not None and prop.org_id != org_id):
        raise NotFoundError("Property not found")
    return prop


def _get_unit(db: Session, unit_id: UUID, property_id: UUID) -> UnitSafe:
    unit = (
        db.query(UnitSafe)
        .filter(UnitSafe.id == unit_id, UnitSafe.is_deleted == False)
        .first()
    )
    if not unit:
        raise NotFoundError("Unit not found")
    if unit.property_id != property_id:
        raise LeaseValidationError(
            [{"field": "unit_id", "message": "unit does not belong to the property"}])
    return unit


def _get_tenant(db: Session, tenant_id: UUID, org_id: Optional[UUID] = None) -> TenantSafe:
    tenant = (
        db.query(TenantSafe)
        .filter(TenantSafe.id == tenant_id, TenantSafe.is_deleted == False)
        .first()
    )
    if not tenant or (org_id is not None and tenant.org_id != org_id):
        raise NotFoundError("Tenant not found")
    return tenant


def _source_template(
    db: Session,
    request: LeaseBuilderRequest,
    org_id: Optional[UUID] = None,
) -> Optional[LeaseTemplate]:
    if request.template_id is None:
        return templates.resolve_default_template(db, request.property_id)

    template = templates.get_template(db, request.template_id, org_id)
    if not templates.is_associated(db, template.id, request.property_id):
        raise TemplateNotAssociated("Template is not associated with this property")
    return template


def merge_customizations(
    template: Optional[LeaseTemplate],
    requested: Customizations,
) -> Customizations:
    """Template builder config is the base; values the caller set win."""
    base = {}
    if template is not None and template.kind == LeaseTemplateKind.builder.value:
        base = dict(template.builder_config or {})
    overrides = requested.model_dump(exclude_unset=True)
    if not base:
        return requested
    return Customizations.model_validate({**base, **overrides})


def _address(prop: PropertySafe) -> str:
    locality = " ".join(p for p in (prop.state, prop.zip_code) if p)
    return ", ".join(p for p in (prop.street, prop.city, locality) if p) or prop.name


def _included_areas(prop: PropertySafe) -> Tuple[str, ...]:
    if isinstance(prop.amenities, list):
        return tuple(str(a) for a in prop.amenities if a)
    return ()


# ----------------------------------------------------
# ✅ Resolution pipeline
# ----------------------------------------------------
def build_resolved_model(
    db: Session,
    request: LeaseBuilderRequest,
    org_id: Optional[UUID] = None,
) -> LeaseBuildContext:
    prop = _get_property(db, request.property_id, org_id)
    unit = _get_unit(db, request.unit_id, prop.id) if request.unit_id else None
    tenant = _get_tenant(db, request.tenant_id, org_id) if request.tenant_id else None
    template = _source_template(db, request, org_id)

    customizations = merge_customizations(template, request.customizations)

    base_rent: Optional[Decimal] = request.rent_amount
    if unit is not None and unit.rent_amount is not None:
        base_rent = unit.rent_amount
    unit_name = unit.name if unit is not None else (request.unit_name or DEFAULT_UNIT_NAME)

    built_before_1978 = (
        (prop.year_built is not None and prop.year_built < LEAD_PAINT_CUTOFF_YEAR)
        or customizations.property_built_before_1978
    )

    figures = derivation_engine.derive(request.lease_terms, customizations, base_rent)
    disclosures = disclosure_resolver.resolve(prop.state, customizations, built_before_1978)
    compliance = disclosure_resolver.compliance_warnings(
        disclosure_resolver.get_jurisdiction_rules(prop.state), customizations, figures)
    clauses = disclosure_resolver.select_clauses(request.lease_terms, customizations)

    landlord = PartyInfo(
        name=prop.landlord_name or prop.landlord_company_name or f"{prop.name} Management",
        company_name=prop.landlord_company_name,
        address=prop.landlord_address,
        email=prop.landlord_email,
        phone=prop.landlord_phone,
    )
    tenant_party = None
    if tenant is not None:
        tenant_party = PartyInfo(name=tenant.name, email=tenant.email, phone=tenant.phone)

    resolved = ResolvedLeaseModel(
        property_id=prop.id,
        unit_id=unit.id if unit is not None else None,
        tenant_id=tenant.id if tenant is not None else None,
        template_id=template.id if template is not None else None,
        jurisdiction=disclosures.jurisdiction,
        landlord=landlord,
        tenant=tenant_party,
        premises=PremisesInfo(
            property_name=prop.name,
            address=_address(prop),
            unit_name=unit_name,
            description=unit.unit_type if unit is not None else None,
            included_areas=_included_areas(prop),
        ),
        term=request.lease_terms,
        customizations=customizations,
        figures=figures,
        disclosures=disclosures,
        clauses=clauses,
        warnings=disclosures.warnings + figures.warnings + compliance,
    )
    return LeaseBuildContext(
        resolved=resolved, property=prop, unit=unit, tenant=tenant, template=template)


def preview(
    db: Session,
    request: LeaseBuilderRequest,
    renderer: BaseLeaseRenderer,
    org_id: Optional[UUID] = None,
) -> Tuple[RenderedArtifact, ResolvedLeaseModel]:
    ctx = build_resolved_model(db, request, org_id)
    artifact = renderer.render(ctx.resolved, RenderMode.preview)
    return artifact, ctx.resolved


# ----------------------------------------------------
# ✅ Generate / regenerate
# ----------------------------------------------------
def _generation_input(request: LeaseGenerateRequest) -> dict:
    return request.model_dump(
        mode="json", exclude_unset=True, exclude={"save_as_template", "template_name"})


def generate(
    db: Session,
    request: LeaseGenerateRequest,
    renderer: BaseLeaseRenderer,
    org_id: Optional[UUID] = None,
    created_by: Optional[str] = None,
    supersedes: Optional[LeaseDocument] = None,
) -> Tuple[LeaseDocument, LeaseLifecycleStatus, ResolvedLeaseModel]:
    """
    Commit a new lease document and start its lifecycle.

    Every call creates a new document. Any failure rolls the whole unit back,
    so no document exists without its signature requests.
    """
    if request.application_status is not None:
        lifecycle.check_application_transition(
            request.application_status, ApplicationStatus.complete)

    ctx = build_resolved_model(db, request, org_id)
    resolved = ctx.resolved

    try:
        doc = renderer.render(
            resolved,
            RenderMode.commit,
            db=db,
            generation_input=_generation_input(request),
            org_id=org_id or ctx.property.org_id,
            created_by=created_by,
        )
        status = lifecycle.initialize_lifecycle(
            db,
            doc,
            tenant_name=ctx.tenant.name if ctx.tenant else None,
            tenant_email=ctx.tenant.email if ctx.tenant else None,
            landlord_name=resolved.landlord.name,
            landlord_email=resolved.landlord.email,
            actor=created_by,
        )

        if request.save_as_template:
            templates.create_template(
                db,
                LeaseTemplateCreate(
                    name=request.template_name or f"{ctx.property.name} Lease Template",
                    kind=LeaseTemplateKind.builder,
                    builder_config=resolved.customizations.model_dump(mode="json"),
                    property_ids=[ctx.property.id],
                ),
                org_id=org_id or ctx.property.org_id,
                created_by=created_by,
                commit=False,
            )

        if supersedes is not None:
            supersedes.superseded_by_id = doc.id
            lifecycle.add_audit_event(
                db, supersedes, AuditEventType.regenerated, actor=created_by,
                actor_role="landlord", details=f"Superseded by {doc.id}")

        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Lease generation failed for property %s", request.property_id)
        raise

    db.refresh(doc)
    logger.info("Lease document %s generated for property %s (%s)",
                doc.id, doc.property_id, status.value)
    return doc, status, resolved


def regenerate(
    db: Session,
    document_id: UUID,
    renderer: BaseLeaseRenderer,
    created_by: Optional[str] = None,
    org_id: Optional[UUID] = None,
) -> Tuple[LeaseDocument, LeaseLifecycleStatus, ResolvedLeaseModel]:
    """
    Re-run the full pipeline from the stored input; the old document is superseded.

    Only a lease that never took effect can be replaced. An active lease ends
    through termination.
    """
    old = lifecycle.get_document(db, document_id, org_id)
    if old.superseded_by_id is not None:
        raise LifecycleTransitionError("Lease document has already been regenerated")
    status = lifecycle.current_status(db, old)
    if status not in REGENERABLE_STATUSES:
        raise LifecycleTransitionError(
            f"A lease in status '{status.value}' cannot be regenerated")

    request = LeaseGenerateRequest.model_validate(old.generation_input)
    return generate(db, request, renderer, org_id=old.org_id,
                    created_by=created_by, supersedes=old)
