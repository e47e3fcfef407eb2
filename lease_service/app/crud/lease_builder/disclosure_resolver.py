"""
Jurisdiction- and property-conditioned disclosure and clause selection.

Everything here is a pure function of its arguments; the state rule table is
module-level constant data.
"""
import logging
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from ...enum.lease_templates_enum import Disclosure, LeaseClause, WarningCode
from ...schemas.lease_builder.lease_builder_schemas import Customizations, LeaseTermInput
from ...schemas.lease_builder.lease_model_schemas import (
    DerivedFigures, DisclosureSet, JurisdictionRules, LeaseWarning
)

logger = logging.getLogger(__name__)


# Lead paint is federal (pre-1978 housing) and is applied outside this table.
STATE_RULES: Dict[str, JurisdictionRules] = {
    "CA": JurisdictionRules(
        code="CA",
        mandated=(Disclosure.mold, Disclosure.bed_bugs, Disclosure.asbestos,
                  Disclosure.flood_zone, Disclosure.sex_offender),
        security_deposit_limit_months=Decimal("2"),
        deposit_return_days=21,
        notes=("Requires specific CA lease addendum",
               "Rent control may apply in some cities"),
    ),
    "NY": JurisdictionRules(
        code="NY",
        mandated=(Disclosure.mold, Disclosure.bed_bugs, Disclosure.asbestos,
                  Disclosure.flood_zone),
        deposit_return_days=14,
        notes=("NYC has additional requirements",
               "Rent stabilization may apply"),
    ),
    "TX": JurisdictionRules(
        code="TX", mandated=(Disclosure.flood_zone,), deposit_return_days=30),
    "FL": JurisdictionRules(
        code="FL",
        mandated=(Disclosure.radon, Disclosure.flood_zone),
        deposit_return_days=15,
        late_fee_limit_percent=Decimal("5"),
    ),
    "NV": JurisdictionRules(
        code="NV", deposit_return_days=30,
        security_deposit_limit_months=Decimal("3")),
    "AZ": JurisdictionRules(
        code="AZ", mandated=(Disclosure.bed_bugs,), deposit_return_days=14,
        security_deposit_limit_months=Decimal("1.5")),
    "CO": JurisdictionRules(
        code="CO", mandated=(Disclosure.radon,), deposit_return_days=30),
    "WA": JurisdictionRules(
        code="WA", mandated=(Disclosure.mold, Disclosure.sex_offender),
        deposit_return_days=21),
    "OR": JurisdictionRules(
        code="OR", mandated=(Disclosure.mold, Disclosure.flood_zone),
        deposit_return_days=31),
    "IL": JurisdictionRules(
        code="IL", mandated=(Disclosure.bed_bugs, Disclosure.radon),
        deposit_return_days=30),
}


def normalize_jurisdiction(jurisdiction: Optional[str]) -> Optional[str]:
    if not jurisdiction:
        return None
    code = jurisdiction.strip().upper()
    return code or None


def get_jurisdiction_rules(jurisdiction: Optional[str]) -> Optional[JurisdictionRules]:
    code = normalize_jurisdiction(jurisdiction)
    if code is None:
        return None
    return STATE_RULES.get(code)


def caller_disclosures(customizations: Customizations) -> List[Disclosure]:
    toggles = [
        (customizations.lead_paint_disclosure, Disclosure.lead_paint),
        (customizations.mold_disclosure, Disclosure.mold),
        (customizations.bed_bug_disclosure, Disclosure.bed_bugs),
        (customizations.radon_disclosure, Disclosure.radon),
        (customizations.flood_zone_disclosure, Disclosure.flood_zone),
        (customizations.asbestos_disclosure, Disclosure.asbestos),
    ]
    return [disclosure for enabled, disclosure in toggles if enabled]


def resolve(
    jurisdiction: Optional[str],
    customizations: Customizations,
    property_built_before_1978: bool,
) -> DisclosureSet:
    """
    Union of the caller's toggles with everything the law forces on.

    Unknown jurisdictions keep the caller's toggles (and the federal lead paint
    rule) and carry a JURISDICTION_UNRESOLVED warning.
    """
    code = normalize_jurisdiction(jurisdiction)
    rules = get_jurisdiction_rules(code)
    chosen = set(caller_disclosures(customizations))

    forced = set()
    if property_built_before_1978 or customizations.property_built_before_1978:
        forced.add(Disclosure.lead_paint)

    warnings: Tuple[LeaseWarning, ...] = ()
    notes: Tuple[str, ...] = ()
    if rules is None:
        logger.warning(
            "Jurisdiction %r not recognized; using caller disclosures only", jurisdiction)
        warnings = (LeaseWarning(
            code=WarningCode.jurisdiction_unresolved,
            message=f"Jurisdiction '{jurisdiction or ''}' is not recognized; "
                    "only the selected disclosures are included",
            subject=code,
        ),)
    else:
        forced.update(rules.mandated)
        notes = rules.notes

    ordered = tuple(sorted(chosen | forced, key=lambda d: d.value))
    return DisclosureSet(
        jurisdiction=code,
        jurisdiction_resolved=rules is not None,
        disclosures=ordered,
        forced=tuple(sorted(forced - chosen, key=lambda d: d.value)),
        notes=notes,
        warnings=warnings,
    )


def select_clauses(term: LeaseTermInput, customizations: Customizations) -> Tuple[LeaseClause, ...]:
    """Optional lease clauses the document must carry, in identifier order."""
    clauses = set()
    if term.is_month_to_month:
        clauses.add(LeaseClause.month_to_month)
    elif customizations.auto_renewal:
        clauses.add(LeaseClause.auto_renewal)
    if customizations.early_termination_fee:
        clauses.add(LeaseClause.early_termination)
    if customizations.allow_partial_payments:
        clauses.add(LeaseClause.partial_payments)
    if customizations.pets_allowed:
        clauses.add(LeaseClause.pets)
    if customizations.smoking_allowed:
        clauses.add(LeaseClause.smoking)
    if customizations.renters_insurance_required:
        clauses.add(LeaseClause.renters_insurance)
    if customizations.additional_terms or customizations.parking_rules:
        clauses.add(LeaseClause.additional_terms)
    return tuple(sorted(clauses, key=lambda c: c.value))


def compliance_warnings(
    rules: Optional[JurisdictionRules],
    customizations: Customizations,
    figures: DerivedFigures,
) -> Tuple[LeaseWarning, ...]:
    """State limit checks. Reported, never enforced."""
    if rules is None:
        return ()

    warnings = []
    limit = rules.security_deposit_limit_months
    if limit is not None and figures.security_deposit_months > limit:
        warnings.append(LeaseWarning(
            code=WarningCode.deposit_exceeds_limit,
            message=f"{rules.code} limits security deposits to {limit} months of rent",
            subject=rules.code,
        ))
    if customizations.deposit_return_days > rules.deposit_return_days:
        warnings.append(LeaseWarning(
            code=WarningCode.deposit_return_exceeds_limit,
            message=f"{rules.code} requires deposits be returned within "
                    f"{rules.deposit_return_days} days",
            subject=rules.code,
        ))
    fee_limit = rules.late_fee_limit_percent
    if (fee_limit is not None and customizations.late_fee_amount is None
            and customizations.late_fee_percent is not None
            and customizations.late_fee_percent > fee_limit):
        warnings.append(LeaseWarning(
            code=WarningCode.late_fee_exceeds_limit,
            message=f"{rules.code} caps late fees at {fee_limit}% of rent",
            subject=rules.code,
        ))

    for warning in warnings:
        logger.warning("Lease compliance: %s", warning.message)
    return tuple(warnings)
