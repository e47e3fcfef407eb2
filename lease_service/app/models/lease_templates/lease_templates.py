import uuid
from sqlalchemy import Boolean, Column, DateTime, JSON, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from shared.core.database import Base


class LeaseTemplate(Base):
    __tablename__ = "lease_templates"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid(as_uuid=True), nullable=True)
    name = Column(String(200), nullable=False)
    kind = Column(String(16), nullable=False)  # builder | uploaded_pdf
    builder_config = Column(JSON().with_variant(JSONB, "postgresql"))
    pdf_url = Column(String(1024))
    created_by = Column(String(64))
    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    is_deleted = Column(Boolean, default=False, nullable=False)

    properties = relationship(
        "PropertyLeaseTemplate", back_populates="template",
        cascade="all, delete-orphan")
