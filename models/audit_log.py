# models/audit_log.py
"""
AuditLog model - append-only trail of every state-changing lease action.

Rows are inserted and never updated or deleted; the mapper refuses both.
Signature rows get the same treatment since they are evidence too.
"""
import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, JSON, event
from .base import Base, utcnow
from .annex import AnnexSignature
from .lease_signature import LeaseSignature


class AuditAction(str, enum.Enum):
     LEASE_CREATED = "LEASE_CREATED"
     LEASE_TENANT_SIGNED = "LEASE_TENANT_SIGNED"
     LEASE_OWNER_SIGNED = "LEASE_OWNER_SIGNED"
     LEASE_FINALIZED = "LEASE_FINALIZED"
     PDF_GENERATED = "PDF_GENERATED"
     PDF_VIEWED = "PDF_VIEWED"
     PDF_DOWNLOADED = "PDF_DOWNLOADED"
     ANNEX_CREATED = "ANNEX_CREATED"
     ANNEX_SIGNED = "ANNEX_SIGNED"


class AuditEntity(str, enum.Enum):
     LEASE = "LEASE"
     ANNEX = "ANNEX"


class AuditLog(Base):
     __tablename__ = "audit_logs"

     id = Column(Integer, primary_key=True, autoincrement=True)
     action = Column(
          Enum(AuditAction, name="audit_action", create_constraint=True),
          nullable=False,
          index=True,
     )
     entity = Column(
          Enum(AuditEntity, name="audit_entity", create_constraint=True),
          nullable=False,
     )
     actor_id = Column(Integer, nullable=True, index=True)
     lease_id = Column(Integer, ForeignKey("leases.id", ondelete="RESTRICT"), nullable=True, index=True)
     annex_id = Column(Integer, ForeignKey("annex_documents.id", ondelete="RESTRICT"), nullable=True, index=True)
     entity_id = Column(String(64), nullable=True)
     meta = Column("metadata", JSON, nullable=False, default=dict)
     created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

     def __repr__(self):
          return f"<AuditLog(id={self.id}, action='{self.action.value}', lease_id={self.lease_id})>"


class ImmutableRecordError(Exception):
     """Raised when code tries to rewrite an append-only record."""


def _forbid_update(mapper, connection, target):
     raise ImmutableRecordError(f"{type(target).__name__} rows are append-only and cannot be updated")


def _forbid_delete(mapper, connection, target):
     raise ImmutableRecordError(f"{type(target).__name__} rows are append-only and cannot be deleted")


for _model in (AuditLog, LeaseSignature, AnnexSignature):
     event.listen(_model, "before_update", _forbid_update)
     event.listen(_model, "before_delete", _forbid_delete)
