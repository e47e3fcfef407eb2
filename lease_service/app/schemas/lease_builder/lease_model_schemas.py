from decimal import Decimal
from typing import Optional, Tuple
from uuid import UUID
from pydantic import BaseModel, ConfigDict

from ...enum.lease_templates_enum import Disclosure, LeaseClause, UtilityPayer, WarningCode
from .lease_builder_schemas import Customizations, LeaseTermInput


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class LeaseWarning(FrozenModel):
    code: WarningCode
    message: str
    subject: Optional[str] = None


class JurisdictionRules(FrozenModel):
    code: str
    mandated: Tuple[Disclosure, ...] = ()
    security_deposit_limit_months: Optional[Decimal] = None
    deposit_return_days: int = 30
    late_fee_limit_percent: Optional[Decimal] = None
    notes: Tuple[str, ...] = ()


class DisclosureSet(FrozenModel):
    jurisdiction: Optional[str] = None
    jurisdiction_resolved: bool
    disclosures: Tuple[Disclosure, ...]
    forced: Tuple[Disclosure, ...] = ()
    notes: Tuple[str, ...] = ()
    warnings: Tuple[LeaseWarning, ...] = ()


class LateFeeSchedule(FrozenModel):
    percent: Optional[Decimal] = None
    amount: Decimal
    applies_days_after_due: int
    max_amount: Optional[Decimal] = None


class UtilityAllocation(FrozenModel):
    utility: str
    payer: UtilityPayer


class DerivedFigures(FrozenModel):
    monthly_rent: Decimal
    security_deposit_months: Decimal
    security_deposit: Decimal
    late_fee: LateFeeSchedule
    rent_due_day: int
    grace_period_ends_day: int
    bounced_check_fee: Optional[Decimal] = None
    pet_deposit: Optional[Decimal] = None
    pet_rent: Optional[Decimal] = None
    early_termination_fee: Optional[Decimal] = None
    total_monthly_charge: Decimal
    move_in_total: Decimal
    lease_term_months: Optional[int] = None
    utility_allocation: Tuple[UtilityAllocation, ...]
    warnings: Tuple[LeaseWarning, ...] = ()


class PartyInfo(FrozenModel):
    name: str
    company_name: Optional[str] = None
    address: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class PremisesInfo(FrozenModel):
    property_name: str
    address: str
    unit_name: str
    description: Optional[str] = None
    included_areas: Tuple[str, ...] = ()


class ResolvedLeaseModel(FrozenModel):
    """Everything the renderer needs. Never patched; regenerate instead."""
    property_id: UUID
    unit_id: Optional[UUID] = None
    tenant_id: Optional[UUID] = None
    template_id: Optional[UUID] = None
    jurisdiction: Optional[str] = None
    landlord: PartyInfo
    tenant: Optional[PartyInfo] = None
    premises: PremisesInfo
    term: LeaseTermInput
    customizations: Customizations
    figures: DerivedFigures
    disclosures: DisclosureSet
    clauses: Tuple[LeaseClause, ...]
    warnings: Tuple[LeaseWarning, ...] = ()


class RenderedArtifact(FrozenModel):
    markup: str
    content_type: str = "text/html"
    document_hash: str
