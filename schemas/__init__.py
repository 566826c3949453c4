# schemas/__init__.py
from .lease import (
     AcceptApplicationRequest,
     LeaseFromApplicationCreate,
     ManualLeaseCreate,
     SignLeaseRequest,
     SignLeaseResponse,
     SignatureResponse,
     FinalizeResponse,
     LeaseResponse,
     LeaseCreatedResponse,
     DocumentVerificationResponse,
     PaymentTermsResponse,
)
from .annex import AnnexSignRequest, AnnexResponse, AnnexListResponse, AnnexSignResponse
from .audit import AuditLogResponse, AuditTrailResponse

__all__ = [
     "AcceptApplicationRequest",
     "LeaseFromApplicationCreate",
     "ManualLeaseCreate",
     "SignLeaseRequest",
     "SignLeaseResponse",
     "SignatureResponse",
     "FinalizeResponse",
     "LeaseResponse",
     "LeaseCreatedResponse",
     "DocumentVerificationResponse",
     "PaymentTermsResponse",
     "AnnexSignRequest",
     "AnnexResponse",
     "AnnexListResponse",
     "AnnexSignResponse",
     "AuditLogResponse",
     "AuditTrailResponse",
]
