from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID
from pydantic import Field

from ...enum.lease_templates_enum import LeaseTemplateKind
from ..lease_builder.lease_builder_schemas import CamelModel


class LeaseTemplateCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    kind: LeaseTemplateKind = LeaseTemplateKind.builder
    builder_config: Optional[Dict[str, Any]] = None   # Customizations payload
    pdf_url: Optional[str] = None                      # when kind="uploaded_pdf"
    property_ids: List[UUID] = Field(default_factory=list)
    is_default: bool = False


class LeaseTemplateOut(CamelModel):
    id: UUID
    name: str
    kind: LeaseTemplateKind
    builder_config: Optional[Dict[str, Any]] = None
    pdf_url: Optional[str] = None
    property_ids: List[UUID] = []
    is_default: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SetDefaultRequest(CamelModel):
    template_id: UUID
    property_id: UUID


class AssignPropertiesRequest(CamelModel):
    property_ids: List[UUID] = Field(..., min_length=1)
