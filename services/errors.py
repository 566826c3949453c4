# services/errors.py
"""
Typed outcomes for lease operations.

Every error carries a stable code and the HTTP status the API boundary
reports it with. Conflict errors (ALREADY_SIGNED, ALREADY_FINALIZED) mean
the requested change already happened; retrying callers can treat them as
convergence rather than failure.
"""
from typing import Optional


class LeaseError(Exception):
     code = "LEASE_ERROR"
     status_code = 400
     default_message = "Lease operation failed"

     def __init__(self, message: Optional[str] = None):
          self.message = message or self.default_message
          super().__init__(self.message)

     def to_dict(self) -> dict:
          return {"error": self.message, "code": self.code}


class NotFoundError(LeaseError):
     code = "NOT_FOUND"
     status_code = 404
     default_message = "Not found"


class ForbiddenError(LeaseError):
     code = "FORBIDDEN"
     status_code = 403
     default_message = "You are not a party to this lease"


class AlreadySignedError(LeaseError):
     code = "ALREADY_SIGNED"
     status_code = 409
     default_message = "This document has already been signed"


class AlreadyFinalizedError(LeaseError):
     code = "ALREADY_FINALIZED"
     status_code = 409
     default_message = "This lease is finalized and can no longer be signed"


class LeaseValidationError(LeaseError):
     code = "VALIDATION"
     status_code = 400
     default_message = "Invalid request"


class SignaturesIncompleteError(LeaseValidationError):
     default_message = "Both the tenant and the owner must sign before the lease can be finalized"


class NotFinalizedError(LeaseValidationError):
     default_message = "The lease is not finalized yet"


class StorageFailureError(LeaseError):
     code = "STORAGE_FAILURE"
     status_code = 503
     default_message = "The lease document could not be generated or stored; please retry"


class IntegrityFailureError(LeaseError):
     code = "INTEGRITY_FAILURE"
     status_code = 500
     default_message = "Lease seal is inconsistent"
