# Mirror of the property service's table; read-only here
import uuid
from sqlalchemy import Boolean, Column, Integer, JSON, String, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from shared.core.database import Base


class PropertySafe(Base):
    __tablename__ = "properties"
    __table_args__ = {"extend_existing": True}

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid(as_uuid=True))
    name = Column(String(200), nullable=False)
    street = Column(String(200))
    city = Column(String(100))
    state = Column(String(32))
    zip_code = Column(String(16))
    year_built = Column(Integer, nullable=True)
    amenities = Column(JSON().with_variant(JSONB, "postgresql"))

    landlord_name = Column(String(200))
    landlord_company_name = Column(String(200))
    landlord_address = Column(String(300))
    landlord_email = Column(String(200))
    landlord_phone = Column(String(32))

    is_deleted = Column(Boolean, default=False, nullable=False)
