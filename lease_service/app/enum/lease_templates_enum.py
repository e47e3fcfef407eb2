from enum import Enum


class LeaseTemplateKind(str, Enum):
    builder = "builder"
    uploaded_pdf = "uploaded_pdf"


class Disclosure(str, Enum):
    asbestos = "asbestos"
    bed_bugs = "bed_bugs"
    flood_zone = "flood_zone"
    lead_paint = "lead_paint"
    mold = "mold"
    radon = "radon"
    sex_offender = "sex_offender"


class UtilityPayer(str, Enum):
    tenant = "tenant"
    landlord = "landlord"
    unassigned = "unassigned"


class LeaseClause(str, Enum):
    additional_terms = "additional_terms"
    auto_renewal = "auto_renewal"
    early_termination = "early_termination"
    month_to_month = "month_to_month"
    partial_payments = "partial_payments"
    pets = "pets"
    renters_insurance = "renters_insurance"
    smoking = "smoking"


class WarningCode(str, Enum):
    jurisdiction_unresolved = "JURISDICTION_UNRESOLVED"
    utility_unassigned = "UTILITY_UNASSIGNED"
    deposit_exceeds_limit = "DEPOSIT_EXCEEDS_LIMIT"
    deposit_return_exceeds_limit = "DEPOSIT_RETURN_EXCEEDS_LIMIT"
    late_fee_exceeds_limit = "LATE_FEE_EXCEEDS_LIMIT"
    late_fee_within_grace = "LATE_FEE_WITHIN_GRACE"
