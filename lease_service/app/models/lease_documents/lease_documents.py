import uuid
from sqlalchemy import Column, Date, DateTime, ForeignKey, JSON, String, Text, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from shared.core.database import Base


class LeaseDocument(Base):
    """A committed lease. Its lifecycle status is derived, never stored."""
    __tablename__ = "lease_documents"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid(as_uuid=True), nullable=True)
    property_id = Column(Uuid(as_uuid=True), ForeignKey(
        "properties.id"), nullable=False, index=True)
    unit_id = Column(Uuid(as_uuid=True), ForeignKey(
        "units.id"), nullable=True)
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey(
        "tenants.id"), nullable=True)
    template_id = Column(Uuid(as_uuid=True), ForeignKey(
        "lease_templates.id", ondelete="SET NULL"), nullable=True)

    jurisdiction = Column(String(32))
    artifact_ref = Column(String(128), nullable=False)
    document_hash = Column(String(64), nullable=False)
    rendered_html = Column(Text, nullable=False)
    resolved_model = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)
    generation_input = Column(JSON().with_variant(JSONB, "postgresql"), nullable=False)

    # termination is an explicit act, not a function of the signatures
    terminated_at = Column(DateTime(timezone=True), nullable=True)
    termination_reason = Column(String(32), nullable=True)
    termination_date = Column(Date, nullable=True)
    termination_notes = Column(Text, nullable=True)

    superseded_by_id = Column(Uuid(as_uuid=True), ForeignKey(
        "lease_documents.id"), nullable=True)
    created_by = Column(String(64), nullable=True)
    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # relationships
    signature_requests = relationship(
        "SignatureRequest", back_populates="document",
        cascade="all, delete-orphan", order_by="SignatureRequest.role")
    audit_events = relationship(
        "LeaseAuditEvent", back_populates="document",
        cascade="all, delete-orphan", order_by="LeaseAuditEvent.created_at")
    template = relationship("LeaseTemplate")
