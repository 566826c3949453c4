# services/__init__.py
from .errors import (
     LeaseError,
     NotFoundError,
     ForbiddenError,
     AlreadySignedError,
     AlreadyFinalizedError,
     LeaseValidationError,
     SignaturesIncompleteError,
     NotFinalizedError,
     StorageFailureError,
     IntegrityFailureError,
)
from .document_hash import compute_document_hash, generate_document_id, verify_document
from .artifact_store import ArtifactStore, LocalArtifactStore, AzureBlobArtifactStore, get_artifact_store
from .lease_service import LeaseService, Principal, SignResult, FinalizeResult, DocumentPayload
from .annex_service import AnnexService, DEFAULT_ANNEXES

__all__ = [
     "LeaseError",
     "NotFoundError",
     "ForbiddenError",
     "AlreadySignedError",
     "AlreadyFinalizedError",
     "LeaseValidationError",
     "SignaturesIncompleteError",
     "NotFinalizedError",
     "StorageFailureError",
     "IntegrityFailureError",
     "compute_document_hash",
     "generate_document_id",
     "verify_document",
     "ArtifactStore",
     "LocalArtifactStore",
     "AzureBlobArtifactStore",
     "get_artifact_store",
     "LeaseService",
     "Principal",
     "SignResult",
     "FinalizeResult",
     "DocumentPayload",
     "AnnexService",
     "DEFAULT_ANNEXES",
]
