import uuid
from sqlalchemy import Boolean, Column, String, Uuid
from shared.core.database import Base


class TenantSafe(Base):
    __tablename__ = "tenants"
    __table_args__ = {"extend_existing": True}

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid(as_uuid=True))
    user_id = Column(Uuid(as_uuid=True), nullable=True)
    name = Column(String(200), nullable=False)
    email = Column(String(200))
    phone = Column(String(32))
    is_deleted = Column(Boolean, default=False, nullable=False)
