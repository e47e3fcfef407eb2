import uuid
from sqlalchemy import Boolean, Column, ForeignKey, Numeric, String, Uuid
from shared.core.database import Base


class UnitSafe(Base):
    __tablename__ = "units"
    __table_args__ = {"extend_existing": True}

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    property_id = Column(Uuid(as_uuid=True), ForeignKey(
        "properties.id"), nullable=False)
    name = Column(String(100), nullable=False)
    unit_type = Column(String(50))
    rent_amount = Column(Numeric(14, 2), nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)
