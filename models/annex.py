# models/annex.py
import enum
from sqlalchemy import (
     Column, Integer, String, Boolean, Text, DateTime, ForeignKey, Enum, UniqueConstraint,
)
from sqlalchemy.orm import relationship, validates
from .base import Base, utcnow
from .lease_signature import SignerRole


class AnnexType(str, enum.Enum):
     """Secondary consent documents generated alongside every lease."""
     PAYMENT_CONSENT = "PAYMENT_CONSENT"
     CREDIT_CHECK_AUTH = "CREDIT_CHECK_AUTH"
     ELECTRONIC_COMMS = "ELECTRONIC_COMMS"


class AnnexDocument(Base):
     """
     Annex document attached to a lease. One row per (lease, type); the set
     is created once and never regenerated.
     """
     __tablename__ = "annex_documents"
     __table_args__ = (
          UniqueConstraint("lease_id", "type", name="uq_annex_documents_lease_type"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     lease_id = Column(Integer, ForeignKey("leases.id", ondelete="RESTRICT"), nullable=False, index=True)
     type = Column(
          Enum(AnnexType, name="annex_type", create_constraint=True),
          nullable=False,
     )
     title = Column(String(255), nullable=False)
     content = Column(Text, nullable=False)
     version = Column(Integer, default=1, nullable=False)
     created_at = Column(DateTime, default=utcnow, nullable=False)

     # Relationships
     lease = relationship("Lease", back_populates="annexes")
     signatures = relationship("AnnexSignature", back_populates="annex", order_by="AnnexSignature.id")

     def __repr__(self):
          return f"<AnnexDocument(id={self.id}, lease_id={self.lease_id}, type='{self.type.value}')>"


class AnnexSignature(Base):
     """One signer's acceptance of one annex document."""
     __tablename__ = "annex_signatures"
     __table_args__ = (
          UniqueConstraint("annex_id", "signer_id", name="uq_annex_signatures_annex_signer"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     annex_id = Column(Integer, ForeignKey("annex_documents.id", ondelete="RESTRICT"), nullable=False, index=True)
     signer_id = Column(Integer, nullable=False)
     signer_email = Column(String(255), nullable=False)
     signer_name = Column(String(200), nullable=True)
     signer_role = Column(
          Enum(SignerRole, name="annex_signer_role", create_constraint=True),
          nullable=False,
     )
     consent_given = Column(Boolean, nullable=False)
     ip_address = Column(String(64), nullable=True)
     user_agent = Column(String(500), nullable=True)
     document_version = Column(Integer, nullable=False)
     signed_at = Column(DateTime, default=utcnow, nullable=False)

     # Relationships
     annex = relationship("AnnexDocument", back_populates="signatures")

     @validates("consent_given")
     def _require_consent(self, key, value):
          if value is not True:
               raise ValueError("An annex cannot be signed without consent")
          return value

     def __repr__(self):
          return f"<AnnexSignature(id={self.id}, annex_id={self.annex_id}, signer_id={self.signer_id})>"
