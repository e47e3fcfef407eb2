from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from ...enum.lease_documents_enum import ApplicationStatus


class CamelModel(BaseModel):
    """Accepts the platform's camelCase payloads as well as snake_case."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LeaseTermInput(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True)

    start_date: date
    end_date: Optional[date] = None
    is_month_to_month: bool = False
    billing_day_of_month: int = Field(1, ge=1, le=31)


DEFAULT_PAYMENT_METHODS = ["Online Payment Portal", "Check", "Money Order"]
DEFAULT_TENANT_UTILITIES = ["Electric", "Gas", "Internet", "Cable"]
DEFAULT_LANDLORD_UTILITIES = ["Water", "Sewer", "Trash"]


class Customizations(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True)

    # Payment
    grace_period_days: int = Field(5, ge=0, le=31)
    late_fee_percent: Optional[Decimal] = Field(Decimal("5"), ge=0, le=100)
    late_fee_amount: Optional[Decimal] = Field(None, ge=0)  # flat alternative to percent
    late_fee_start_day: int = Field(6, ge=1, le=31)
    max_late_fee: Optional[Decimal] = Field(None, ge=0)
    bounced_check_fee: Optional[Decimal] = Field(Decimal("35"), ge=0)
    allow_partial_payments: bool = False
    accepted_payment_methods: List[str] = Field(
        default_factory=lambda: list(DEFAULT_PAYMENT_METHODS))
    payment_instructions: Optional[str] = None

    # Deposit
    security_deposit_months: Decimal = Field(Decimal("1"), ge=0, le=12)
    deposit_return_days: int = Field(30, ge=0, le=365)

    # Renewal & termination
    auto_renewal: bool = True
    renewal_notice_days: int = Field(30, ge=0, le=365)
    early_termination_fee: Optional[Decimal] = Field(None, ge=0)
    early_termination_notice_days: int = Field(60, ge=0, le=365)

    # Utilities
    tenant_pays_utilities: List[str] = Field(
        default_factory=lambda: list(DEFAULT_TENANT_UTILITIES))
    landlord_pays_utilities: List[str] = Field(
        default_factory=lambda: list(DEFAULT_LANDLORD_UTILITIES))

    # Pets
    pets_allowed: bool = False
    pet_restrictions: Optional[str] = None
    pet_deposit: Optional[Decimal] = Field(None, ge=0)
    pet_rent: Optional[Decimal] = Field(None, ge=0)

    # Conduct
    smoking_allowed: bool = False
    smoking_areas: Optional[str] = None
    quiet_hours_start: str = "10:00 PM"
    quiet_hours_end: str = "8:00 AM"
    entry_notice_hours: int = Field(24, ge=0, le=168)
    move_out_notice_days: int = Field(30, ge=0, le=365)
    parking_rules: Optional[str] = None

    # Insurance
    renters_insurance_required: bool = False
    min_insurance_coverage: Optional[Decimal] = Field(Decimal("100000"), ge=0)

    additional_terms: List[str] = Field(default_factory=list)

    # Disclosures
    lead_paint_disclosure: bool = False
    mold_disclosure: bool = False
    bed_bug_disclosure: bool = False
    radon_disclosure: bool = False
    flood_zone_disclosure: bool = False
    asbestos_disclosure: bool = False
    property_built_before_1978: bool = False

    @field_validator("additional_terms", mode="before")
    @classmethod
    def split_terms(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [line.strip() for line in v.splitlines() if line.strip()]
        return v

    @model_validator(mode="after")
    def force_lead_paint(self):
        if self.property_built_before_1978 and not self.lead_paint_disclosure:
            object.__setattr__(self, "lead_paint_disclosure", True)
        return self


class LeaseBuilderRequest(CamelModel):
    property_id: UUID
    unit_id: Optional[UUID] = None
    tenant_id: Optional[UUID] = None
    template_id: Optional[UUID] = None
    lease_terms: LeaseTermInput
    customizations: Customizations = Field(default_factory=Customizations)
    rent_amount: Optional[Decimal] = None
    unit_name: Optional[str] = None
    application_status: Optional[ApplicationStatus] = None


class LeaseGenerateRequest(LeaseBuilderRequest):
    save_as_template: bool = False
    template_name: Optional[str] = None
