# services/audit_service.py
"""
Audit Log Service - append-only record of lease state changes.

Writes run in a savepoint so a failed audit insert never rolls back the
action it describes. Failures are logged with the full traceback instead of
being dropped.
"""
import logging
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from models import AnnexDocument, AuditAction, AuditEntity, AuditLog

logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
     if isinstance(value, dict):
          return {str(k): _jsonable(v) for k, v in value.items()}
     if isinstance(value, (list, tuple)):
          return [_jsonable(v) for v in value]
     if isinstance(value, Enum):
          return value.value
     if isinstance(value, Decimal):
          return str(value)
     if isinstance(value, (datetime, date)):
          return value.isoformat()
     return value


def record(
     db: Session,
     action: AuditAction,
     entity: AuditEntity,
     *,
     actor_id: Optional[int] = None,
     lease_id: Optional[int] = None,
     annex_id: Optional[int] = None,
     entity_id: Optional[Any] = None,
     metadata: Optional[dict] = None,
) -> Optional[AuditLog]:
     """
     Append one audit entry.

     Returns the entry, or None when the write failed (already logged).
     """
     try:
          with db.begin_nested():
               entry = AuditLog(
                    action=action,
                    entity=entity,
                    actor_id=actor_id,
                    lease_id=lease_id,
                    annex_id=annex_id,
                    entity_id=str(entity_id) if entity_id is not None else None,
                    meta=_jsonable(metadata or {}),
               )
               db.add(entry)
          return entry
     except Exception:
          logger.exception(
               "Audit log write failed: action=%s entity=%s actor_id=%s lease_id=%s annex_id=%s",
               getattr(action, "value", action), getattr(entity, "value", entity),
               actor_id, lease_id, annex_id,
          )
          return None


def list_for_lease(db: Session, lease_id: int) -> List[AuditLog]:
     """Entries for the lease and its annexes, oldest first."""
     annex_ids = select(AnnexDocument.id).where(AnnexDocument.lease_id == lease_id)
     return (
          db.query(AuditLog)
          .filter(or_(AuditLog.lease_id == lease_id, AuditLog.annex_id.in_(annex_ids)))
          .order_by(AuditLog.id)
          .all()
     )


def count_actions(db: Session, lease_id: int, action: AuditAction) -> int:
     return (
          db.query(AuditLog)
          .filter(AuditLog.lease_id == lease_id, AuditLog.action == action)
          .count()
     )
