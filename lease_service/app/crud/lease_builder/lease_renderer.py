import hashlib
import logging
import os
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Any, Optional, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError, select_autoescape
from sqlalchemy.orm import Session

from ...core.exceptions import RenderFailure
from ...enum.lease_documents_enum import RenderMode
from ...enum.lease_templates_enum import Disclosure, UtilityPayer
from ...models.lease_documents.lease_documents import LeaseDocument
from ...schemas.lease_builder.lease_model_schemas import RenderedArtifact, ResolvedLeaseModel

logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), "templates")
LEASE_TEMPLATE_NAME = "lease_agreement.html"

DISCLOSURE_TITLES = {
    Disclosure.asbestos: "Asbestos Disclosure",
    Disclosure.bed_bugs: "Bed Bug Disclosure",
    Disclosure.flood_zone: "Flood Zone Disclosure",
    Disclosure.lead_paint: "Lead-Based Paint Disclosure (Required for Pre-1978 Housing)",
    Disclosure.mold: "Mold Disclosure",
    Disclosure.radon: "Radon Disclosure",
    Disclosure.sex_offender: "Sex Offender Registry Notice",
}


def format_currency(amount: Optional[Decimal]) -> str:
    if amount is None:
        return ""
    return f"${Decimal(amount):,.2f}"


def format_long_date(value: Optional[date]) -> str:
    if value is None:
        return ""
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def document_hash(markup: str) -> str:
    return hashlib.sha256(markup.encode("utf-8")).hexdigest()


class BaseLeaseRenderer(ABC):
    """
    Seam between the resolved lease model and a concrete rendering technology.

    Preview renders are stateless. Commit renders are the only place a
    LeaseDocument row is created; the caller owns the transaction.
    """

    content_type = "text/html"

    @abstractmethod
    def render_markup(self, resolved: ResolvedLeaseModel) -> str:
        raise NotImplementedError

    def render(
        self,
        resolved: ResolvedLeaseModel,
        mode: RenderMode,
        db: Optional[Session] = None,
        generation_input: Optional[dict] = None,
        org_id: Optional[Any] = None,
        created_by: Optional[str] = None,
    ) -> Union[RenderedArtifact, LeaseDocument]:
        if not isinstance(resolved, ResolvedLeaseModel):
            raise TypeError("renderer accepts only a ResolvedLeaseModel")

        try:
            markup = self.render_markup(resolved)
        except RenderFailure:
            raise
        except Exception as e:
            logger.exception("Lease render failed for property %s", resolved.property_id)
            raise RenderFailure(f"Lease document could not be rendered: {e}") from e

        artifact = RenderedArtifact(
            markup=markup,
            content_type=self.content_type,
            document_hash=document_hash(markup),
        )
        if mode == RenderMode.preview:
            return artifact

        if db is None:
            raise ValueError("commit rendering requires a database session")

        doc = LeaseDocument(
            org_id=org_id,
            property_id=resolved.property_id,
            unit_id=resolved.unit_id,
            tenant_id=resolved.tenant_id,
            template_id=resolved.template_id,
            jurisdiction=resolved.jurisdiction,
            artifact_ref=f"sha256:{artifact.document_hash}",
            document_hash=artifact.document_hash,
            rendered_html=artifact.markup,
            resolved_model=resolved.model_dump(mode="json"),
            generation_input=generation_input or {},
            created_by=created_by,
        )
        db.add(doc)
        db.flush()
        return doc


class HtmlLeaseRenderer(BaseLeaseRenderer):

    def __init__(self, template_dir: str = TEMPLATE_DIR):
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["currency"] = format_currency
        self.env.filters["long_date"] = format_long_date
        self.env.filters["ordinal"] = ordinal

    def render_markup(self, resolved: ResolvedLeaseModel) -> str:
        try:
            template = self.env.get_template(LEASE_TEMPLATE_NAME)
            figures = resolved.figures
            return template.render(
                lease=resolved,
                terms=resolved.customizations,
                figures=figures,
                clauses=[c.value for c in resolved.clauses],
                disclosures=[
                    {"id": d.value, "title": DISCLOSURE_TITLES[d]}
                    for d in resolved.disclosures.disclosures
                ],
                tenant_utilities=[u.utility for u in figures.utility_allocation
                                  if u.payer == UtilityPayer.tenant],
                landlord_utilities=[u.utility for u in figures.utility_allocation
                                    if u.payer == UtilityPayer.landlord],
                unassigned_utilities=[u.utility for u in figures.utility_allocation
                                      if u.payer == UtilityPayer.unassigned],
            )
        except TemplateError as e:
            raise RenderFailure(f"Lease template error: {e}") from e


_renderer: Optional[BaseLeaseRenderer] = None


def get_lease_renderer() -> BaseLeaseRenderer:
    global _renderer
    if _renderer is None:
        _renderer = HtmlLeaseRenderer()
    return _renderer
