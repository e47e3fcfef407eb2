from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from shared.core.database import Base


class PropertyLeaseTemplate(Base):
    """Template <-> property link. The default flag is per property."""
    __tablename__ = "property_lease_templates"

    property_id = Column(Uuid(as_uuid=True), ForeignKey(
        "properties.id"), primary_key=True)
    template_id = Column(Uuid(as_uuid=True), ForeignKey(
        "lease_templates.id", ondelete="CASCADE"), primary_key=True)
    is_default = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)

    template = relationship("LeaseTemplate", back_populates="properties")


# at most one default per property
Index(
    "uq_property_default_template",
    PropertyLeaseTemplate.property_id,
    unique=True,
    postgresql_where=PropertyLeaseTemplate.is_default.is_(True),
    sqlite_where=PropertyLeaseTemplate.is_default.is_(True),
)
