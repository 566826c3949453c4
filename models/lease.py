# models/lease.py
import enum
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy import (
     Column, Integer, String, Numeric, Date, Text, DateTime, ForeignKey, Enum, JSON,
     CheckConstraint, event, inspect,
)
from sqlalchemy.orm import relationship, validates
from sqlalchemy.orm.attributes import get_history
from .base import Base, utcnow


class LeaseStatus(str, enum.Enum):
     """Lease signature lifecycle. FINALIZED is terminal."""
     DRAFT = "DRAFT"
     TENANT_SIGNED = "TENANT_SIGNED"
     OWNER_SIGNED = "OWNER_SIGNED"
     FINALIZED = "FINALIZED"


class LeaseOrigin(str, enum.Enum):
     """How the lease came into existence."""
     APPLICATION = "APPLICATION"
     MANUAL = "MANUAL"


@dataclass(frozen=True)
class FromApplication:
     application_id: int


@dataclass(frozen=True)
class ManualEntry:
     listing_id: Optional[int]


LeaseSource = Union[FromApplication, ManualEntry]

# Landlord-authored blocks captured at creation and never rewritten.
WRITE_ONCE_BLOCKS = ("landlord_info", "property_info", "lease_terms", "additional_conditions")


class Lease(Base):
     """
     Lease model - one tenancy contract between a tenant and a landlord.

     The parties are stored on the lease itself so both origins (accepted
     application or manual entry) expose them the same way. The seal fields
     (document_id, document_hash, pdf_url) are written together by
     finalization and are either all null or all set.
     """
     __tablename__ = "leases"
     __table_args__ = (
          CheckConstraint(
               "(document_id IS NULL AND document_hash IS NULL AND pdf_url IS NULL) OR "
               "(document_id IS NOT NULL AND document_hash IS NOT NULL AND pdf_url IS NOT NULL)",
               name="ck_leases_seal_all_or_nothing",
          ),
          CheckConstraint(
               "(origin = 'APPLICATION' AND application_id IS NOT NULL) OR "
               "(origin = 'MANUAL' AND application_id IS NULL)",
               name="ck_leases_origin_application",
          ),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     origin = Column(
          Enum(LeaseOrigin, name="lease_origin", create_constraint=True),
          nullable=False,
     )
     application_id = Column(Integer, ForeignKey("applications.id"), nullable=True, unique=True)
     listing_id = Column(Integer, ForeignKey("listings.id"), nullable=True, index=True)

     # Parties
     tenant_user_id = Column(Integer, nullable=False, index=True)
     tenant_email = Column(String(255), nullable=False)
     tenant_name = Column(String(200), nullable=True)
     landlord_user_id = Column(Integer, nullable=False, index=True)
     landlord_email = Column(String(255), nullable=False)
     landlord_name = Column(String(200), nullable=True)

     # Lease period
     start_date = Column(Date, nullable=False)
     end_date = Column(Date, nullable=False)

     # Pricing
     monthly_rent = Column(Numeric(12, 2), nullable=False)
     deposit = Column(Numeric(12, 2), nullable=False)

     # Terms
     terms = Column(Text, nullable=True)
     landlord_info = Column(JSON, nullable=True)
     property_info = Column(JSON, nullable=True)
     lease_terms = Column(JSON, nullable=True)
     additional_conditions = Column(JSON, nullable=True)

     status = Column(
          Enum(LeaseStatus, name="lease_status", create_constraint=True),
          default=LeaseStatus.DRAFT,
          nullable=False,
          index=True,
     )
     pdf_version = Column(Integer, default=1, nullable=False)

     # Seal
     document_id = Column(String(64), nullable=True, unique=True)
     document_hash = Column(String(64), nullable=True)  # SHA-256 hex length
     pdf_url = Column(String(500), nullable=True)
     finalized_at = Column(DateTime, nullable=True)

     # Timestamps
     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, onupdate=utcnow, nullable=True)

     # Relationships
     application = relationship("Application", back_populates="lease")
     listing = relationship("Listing")
     signatures = relationship("LeaseSignature", back_populates="lease", order_by="LeaseSignature.id")
     annexes = relationship("AnnexDocument", back_populates="lease", order_by="AnnexDocument.id")

     @validates(*WRITE_ONCE_BLOCKS)
     def _write_once(self, key, value):
          # Expired attributes are not in __dict__; load them before comparing.
          current = getattr(self, key) if inspect(self).has_identity else self.__dict__.get(key)
          if current is not None and current != value:
               raise ValueError(f"{key} cannot be changed once the lease is created")
          return value

     @property
     def source(self) -> LeaseSource:
          if self.origin == LeaseOrigin.APPLICATION:
               return FromApplication(application_id=self.application_id)
          return ManualEntry(listing_id=self.listing_id)

     @property
     def is_sealed(self) -> bool:
          return self.document_id is not None and self.document_hash is not None and self.pdf_url is not None

     @property
     def has_consistent_seal(self) -> bool:
          fields = (self.document_id, self.document_hash, self.pdf_url)
          return all(f is None for f in fields) or all(f is not None for f in fields)

     def is_tenant(self, user_id) -> bool:
          return user_id is not None and self.tenant_user_id == user_id

     def is_landlord(self, user_id) -> bool:
          return user_id is not None and self.landlord_user_id == user_id

     @staticmethod
     def seal_values(document_id: str, document_hash: str, pdf_url: str, finalized_at=None) -> dict:
          """Column values that seal a lease. All seal fields change together."""
          return {
               "status": LeaseStatus.FINALIZED,
               "document_id": document_id,
               "document_hash": document_hash,
               "pdf_url": pdf_url,
               "finalized_at": finalized_at or utcnow(),
          }

     def __repr__(self):
          return f"<Lease(id={self.id}, status='{self.status.value}', tenant_user_id={self.tenant_user_id})>"


@event.listens_for(Lease, "before_update")
def _forbid_block_rewrite(mapper, connection, target):
     for key in WRITE_ONCE_BLOCKS:
          history = get_history(target, key)
          previous = [value for value in history.deleted if value is not None]
          if previous and history.added and history.added[0] != previous[0]:
               raise ValueError(f"{key} cannot be changed once the lease is created")
