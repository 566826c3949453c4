# models/__init__.py
from .base import Base
from .listing import Listing
from .application import Application, ApplicationStatus
from .lease import Lease, LeaseStatus, LeaseOrigin, FromApplication, ManualEntry
from .lease_signature import LeaseSignature, SignerRole
from .annex import AnnexDocument, AnnexSignature, AnnexType
from .audit_log import AuditLog, AuditAction, AuditEntity, ImmutableRecordError

__all__ = [
     "Base",
     "Listing",
     "Application",
     "ApplicationStatus",
     "Lease",
     "LeaseStatus",
     "LeaseOrigin",
     "FromApplication",
     "ManualEntry",
     "LeaseSignature",
     "SignerRole",
     "AnnexDocument",
     "AnnexSignature",
     "AnnexType",
     "AuditLog",
     "AuditAction",
     "AuditEntity",
     "ImmutableRecordError",
]
