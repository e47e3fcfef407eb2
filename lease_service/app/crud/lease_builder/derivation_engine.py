"""
Computed contract figures: deposit, late fee schedule, due day and utility split.

Currency is handled in integer minor units (cents). Rates are applied once to
the minor-unit amount and rounded half-up a single time.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Sequence

from dateutil.relativedelta import relativedelta

from shared.core.config import settings
from ...core.exceptions import LeaseValidationError
from ...enum.lease_templates_enum import UtilityPayer, WarningCode
from ...schemas.lease_builder.lease_builder_schemas import Customizations, LeaseTermInput
from ...schemas.lease_builder.lease_model_schemas import (
    DerivedFigures, LateFeeSchedule, LeaseWarning, UtilityAllocation
)

logger = logging.getLogger(__name__)

MINOR_UNITS_PER_MAJOR = 100
LAST_SAFE_DUE_DAY = 28  # exists in every month


def to_minor_units(amount) -> int:
    return int((Decimal(str(amount)) * MINOR_UNITS_PER_MAJOR).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(minor: int) -> Decimal:
    return (Decimal(minor) / MINOR_UNITS_PER_MAJOR).quantize(Decimal("0.01"))


def apply_rate(minor: int, rate: Decimal) -> int:
    return int((Decimal(minor) * Decimal(str(rate))).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP))


def _optional_money(amount: Optional[Decimal]) -> Optional[Decimal]:
    if amount is None:
        return None
    return from_minor_units(to_minor_units(amount))


def _utility_key(name: str) -> str:
    return name.strip().lower()


def validate_lease_input(
    term: LeaseTermInput,
    customizations: Customizations,
    base_rent: Optional[Decimal],
) -> None:
    issues: List[Dict[str, str]] = []

    if base_rent is None:
        issues.append({"field": "rent_amount",
                       "message": "rent amount is required when no unit is attached"})
    elif Decimal(str(base_rent)) <= 0:
        issues.append({"field": "rent_amount",
                       "message": "rent amount must be greater than zero"})

    if not term.is_month_to_month:
        if term.end_date is None:
            issues.append({"field": "end_date",
                           "message": "end date is required unless the lease is month-to-month"})
        elif term.end_date <= term.start_date:
            issues.append({"field": "end_date",
                           "message": "end date must be after the start date"})

    tenant_keys = {_utility_key(u) for u in customizations.tenant_pays_utilities}
    for utility in customizations.landlord_pays_utilities:
        if _utility_key(utility) in tenant_keys:
            issues.append({"field": "utilities",
                           "message": f"'{utility.strip()}' is assigned to both tenant and landlord"})

    if issues:
        raise LeaseValidationError(issues)


def allocate_utilities(
    tenant_pays: Iterable[str],
    landlord_pays: Iterable[str],
    catalog: Sequence[str],
) -> List[UtilityAllocation]:
    """Catalog order first, then any extra utilities in the order given."""
    labels = {_utility_key(u): u for u in catalog}
    payers: Dict[str, UtilityPayer] = {}
    order: List[str] = [_utility_key(u) for u in catalog]

    for names, payer in ((tenant_pays, UtilityPayer.tenant), (landlord_pays, UtilityPayer.landlord)):
        for name in names:
            key = _utility_key(name)
            if not key:
                continue
            payers[key] = payer
            if key not in labels:
                labels[key] = name.strip()
                order.append(key)

    return [
        UtilityAllocation(utility=labels[key],
                          payer=payers.get(key, UtilityPayer.unassigned))
        for key in order
    ]


def derive(
    term: LeaseTermInput,
    customizations: Customizations,
    base_rent: Decimal,
    utility_catalog: Optional[Sequence[str]] = None,
) -> DerivedFigures:
    validate_lease_input(term, customizations, base_rent)
    catalog = settings.UTILITY_CATALOG if utility_catalog is None else utility_catalog

    rent = to_minor_units(base_rent)
    deposit = apply_rate(rent, customizations.security_deposit_months)

    if customizations.late_fee_amount is not None:
        late_fee_percent = None
        late_fee = to_minor_units(customizations.late_fee_amount)
    elif customizations.late_fee_percent is not None:
        late_fee_percent = customizations.late_fee_percent
        late_fee = apply_rate(rent, customizations.late_fee_percent / Decimal(100))
    else:
        late_fee_percent = None
        late_fee = 0
    max_late_fee = _optional_money(customizations.max_late_fee)
    if max_late_fee is not None:
        late_fee = min(late_fee, to_minor_units(max_late_fee))

    pet_deposit = pet_rent = None
    if customizations.pets_allowed:
        pet_deposit = _optional_money(customizations.pet_deposit)
        pet_rent = _optional_money(customizations.pet_rent)
    monthly_total = rent + (to_minor_units(pet_rent) if pet_rent else 0)
    move_in_total = rent + deposit + (to_minor_units(pet_deposit) if pet_deposit else 0)

    rent_due_day = min(term.billing_day_of_month, LAST_SAFE_DUE_DAY)

    lease_term_months = None
    if not term.is_month_to_month and term.end_date is not None:
        delta = relativedelta(term.end_date, term.start_date)
        lease_term_months = delta.years * 12 + delta.months

    allocation = allocate_utilities(
        customizations.tenant_pays_utilities,
        customizations.landlord_pays_utilities,
        catalog,
    )

    warnings = []
    for item in allocation:
        if item.payer == UtilityPayer.unassigned:
            warnings.append(LeaseWarning(
                code=WarningCode.utility_unassigned,
                message=f"{item.utility} is not assigned to tenant or landlord",
                subject=item.utility,
            ))
    if late_fee and customizations.late_fee_start_day <= customizations.grace_period_days:
        warnings.append(LeaseWarning(
            code=WarningCode.late_fee_within_grace,
            message="Late fee begins before the grace period ends",
            subject="late_fee_start_day",
        ))
    for warning in warnings:
        logger.warning("Lease derivation: %s", warning.message)

    return DerivedFigures(
        monthly_rent=from_minor_units(rent),
        security_deposit_months=customizations.security_deposit_months,
        security_deposit=from_minor_units(deposit),
        late_fee=LateFeeSchedule(
            percent=late_fee_percent,
            amount=from_minor_units(late_fee),
            applies_days_after_due=customizations.late_fee_start_day,
            max_amount=max_late_fee,
        ),
        rent_due_day=rent_due_day,
        grace_period_ends_day=rent_due_day + customizations.grace_period_days,
        bounced_check_fee=_optional_money(customizations.bounced_check_fee),
        pet_deposit=pet_deposit,
        pet_rent=pet_rent,
        early_termination_fee=_optional_money(customizations.early_termination_fee),
        total_monthly_charge=from_minor_units(monthly_total),
        move_in_total=from_minor_units(move_in_total),
        lease_term_months=lease_term_months,
        utility_allocation=tuple(allocation),
        warnings=tuple(warnings),
    )
