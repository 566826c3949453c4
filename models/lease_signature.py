# models/lease_signature.py
"""
LeaseSignature model - one party's acceptance of a lease document version.

Tenant and owner signatures share a table and are told apart by signer_role.
The (lease_id, signer_role) unique constraint is what guarantees a single
signature per role, even when two requests race.
"""
import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship, validates
from .base import Base, utcnow


class SignerRole(str, enum.Enum):
     TENANT = "TENANT"
     OWNER = "OWNER"


class LeaseSignature(Base):
     """Immutable once inserted. Never updated or deleted."""
     __tablename__ = "lease_signatures"
     __table_args__ = (
          UniqueConstraint("lease_id", "signer_role", name="uq_lease_signatures_lease_role"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     lease_id = Column(Integer, ForeignKey("leases.id", ondelete="RESTRICT"), nullable=False, index=True)
     signer_role = Column(
          Enum(SignerRole, name="signer_role", create_constraint=True),
          nullable=False,
     )
     signer_id = Column(Integer, nullable=False)
     signer_email = Column(String(255), nullable=False)
     signer_name = Column(String(200), nullable=True)
     initials = Column(String(10), nullable=True)
     consent_given = Column(Boolean, nullable=False)

     # Capture context, best effort
     ip_address = Column(String(64), nullable=True)
     user_agent = Column(String(500), nullable=True)

     document_version = Column(Integer, nullable=False)
     signed_at = Column(DateTime, default=utcnow, nullable=False)

     # Relationships
     lease = relationship("Lease", back_populates="signatures")

     @validates("consent_given")
     def _require_consent(self, key, value):
          if value is not True:
               raise ValueError("A signature cannot be recorded without consent")
          return value

     def __repr__(self):
          return f"<LeaseSignature(id={self.id}, lease_id={self.lease_id}, role='{self.signer_role.value}')>"
