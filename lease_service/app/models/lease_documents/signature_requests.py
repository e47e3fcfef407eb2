import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from shared.core.database import Base


class SignatureRequest(Base):
    __tablename__ = "signature_requests"
    __table_args__ = (
        UniqueConstraint("document_id", "role",
                         name="uq_signature_request_document_role"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    document_id = Column(Uuid(as_uuid=True), ForeignKey(
        "lease_documents.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(16), nullable=False)  # tenant | landlord
    status = Column(String(16), nullable=False, default="pending")  # pending | signed | declined

    token = Column(String(64), nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    recipient_name = Column(String(200))
    recipient_email = Column(String(200))

    signed_at = Column(DateTime(timezone=True), nullable=True)
    declined_at = Column(DateTime(timezone=True), nullable=True)
    signer_name = Column(String(200))
    signer_email = Column(String(200))
    signer_ip = Column(String(64))
    signer_user_agent = Column(String(512))

    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    document = relationship("LeaseDocument", back_populates="signature_requests")
