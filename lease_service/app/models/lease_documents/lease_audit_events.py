import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship
from shared.core.database import Base


class LeaseAuditEvent(Base):
    __tablename__ = "lease_audit_events"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    document_id = Column(Uuid(as_uuid=True), ForeignKey(
        "lease_documents.id", ondelete="CASCADE"), nullable=False, index=True)
    event_type = Column(String(32), nullable=False)
    actor = Column(String(200), nullable=False, default="system")
    actor_role = Column(String(16), nullable=False, default="system")  # landlord | tenant | system
    details = Column(Text)
    document_hash = Column(String(64))
    ip_address = Column(String(64))
    user_agent = Column(String(512))
    created_at = Column(DateTime(timezone=True), nullable=False,
                        default=lambda: datetime.now(timezone.utc))

    document = relationship("LeaseDocument", back_populates="audit_events")
