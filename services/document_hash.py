# services/document_hash.py
"""
Document Hasher - content-integrity digests for sealed lease documents.

The digest is a SHA-256 over the exact rendered bytes. The document id is
derived from the lease rather than drawn at random, so a finalize retry
after a failed render or upload reuses the same id.
"""
import hashlib
from datetime import datetime
from typing import Tuple


def compute_document_hash(data: bytes) -> str:
     """Return the 64-char SHA-256 hex digest of the document bytes."""
     return hashlib.sha256(data).hexdigest()


def generate_document_id(lease_id: int, version: int, created_at: datetime) -> str:
     """
     Document id for one version of a lease.

     Format: LEASE-{lease_id}-V{version}-{8 hex chars}. The suffix comes from
     the lease creation time, so ids are stable per lease version but not
     guessable from the lease id alone.
     """
     payload = "|".join([str(lease_id), str(version), created_at.isoformat()])
     suffix = hashlib.sha256(payload.encode("utf-8")).hexdigest()[:8].upper()
     return f"LEASE-{lease_id}-V{version}-{suffix}"


def verify_document(data: bytes, expected_hash: str) -> Tuple[bool, str]:
     """
     Recompute the digest of stored bytes and compare with the sealed hash.

     Returns:
          (success: bool, message: str)
     """
     computed = compute_document_hash(data)
     if computed != expected_hash:
          return False, f"Hash mismatch: stored={expected_hash[:16]}..., computed={computed[:16]}..."
     return True, "Verification passed"
