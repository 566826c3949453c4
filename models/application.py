# models/application.py
import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from .base import Base, utcnow


class ApplicationStatus(str, enum.Enum):
     """Lifecycle of a tenant application, as far as the lease engine cares."""
     DRAFT = "DRAFT"
     SUBMITTED = "SUBMITTED"
     ACCEPTED = "ACCEPTED"
     REJECTED = "REJECTED"


class Application(Base):
     """
     Application read model - a tenant's application for a listing.

     The multi-step application wizard is owned elsewhere; the lease engine
     accepts submitted applications and seeds leases from accepted ones.
     """
     __tablename__ = "applications"

     id = Column(Integer, primary_key=True, autoincrement=True)
     listing_id = Column(Integer, ForeignKey("listings.id"), nullable=False, index=True)
     tenant_user_id = Column(Integer, nullable=False, index=True)
     tenant_name = Column(String(200), nullable=True)
     tenant_email = Column(String(255), nullable=False)
     status = Column(
          Enum(ApplicationStatus, name="application_status", create_constraint=True),
          default=ApplicationStatus.SUBMITTED,
          nullable=False,
     )

     created_at = Column(DateTime, default=utcnow, nullable=False)
     updated_at = Column(DateTime, onupdate=utcnow, nullable=True)

     # Relationships
     listing = relationship("Listing", back_populates="applications")
     lease = relationship("Lease", back_populates="application", uselist=False)

     def mark_as_accepted(self) -> None:
          self.status = ApplicationStatus.ACCEPTED

     def __repr__(self):
          return f"<Application(id={self.id}, listing_id={self.listing_id}, status='{self.status.value}')>"
