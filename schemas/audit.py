# schemas/audit.py
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuditActionEnum(str, Enum):
     LEASE_CREATED = "LEASE_CREATED"
     LEASE_TENANT_SIGNED = "LEASE_TENANT_SIGNED"
     LEASE_OWNER_SIGNED = "LEASE_OWNER_SIGNED"
     LEASE_FINALIZED = "LEASE_FINALIZED"
     PDF_GENERATED = "PDF_GENERATED"
     PDF_VIEWED = "PDF_VIEWED"
     PDF_DOWNLOADED = "PDF_DOWNLOADED"
     ANNEX_CREATED = "ANNEX_CREATED"
     ANNEX_SIGNED = "ANNEX_SIGNED"


class AuditEntityEnum(str, Enum):
     LEASE = "LEASE"
     ANNEX = "ANNEX"


class AuditLogResponse(BaseModel):
     id: int
     action: AuditActionEnum
     entity: AuditEntityEnum
     actor_id: Optional[int] = None
     lease_id: Optional[int] = None
     annex_id: Optional[int] = None
     entity_id: Optional[str] = None
     metadata: dict = Field(default_factory=dict, validation_alias="meta")
     created_at: datetime

     model_config = ConfigDict(from_attributes=True)


class AuditTrailResponse(BaseModel):
     lease_id: int
     entries: List[AuditLogResponse]
     total: int
