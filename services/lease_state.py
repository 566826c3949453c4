# services/lease_state.py
"""
Lease state machine.

States: DRAFT -> TENANT_SIGNED | OWNER_SIGNED -> FINALIZED.

The stored lease.status is a cache. The authoritative status is derived
from which signature rows exist (derive_status); the transition table
decides whether a given signer may still sign from a given state.
"""
from models.lease import LeaseStatus
from models.lease_signature import SignerRole
from services.errors import AlreadyFinalizedError, AlreadySignedError, IntegrityFailureError


_TRANSITIONS = {
     (LeaseStatus.DRAFT, SignerRole.TENANT): LeaseStatus.TENANT_SIGNED,
     (LeaseStatus.DRAFT, SignerRole.OWNER): LeaseStatus.OWNER_SIGNED,
     (LeaseStatus.OWNER_SIGNED, SignerRole.TENANT): LeaseStatus.FINALIZED,
     (LeaseStatus.TENANT_SIGNED, SignerRole.OWNER): LeaseStatus.FINALIZED,
}

# (state, role) pairs where that role has already signed.
_ALREADY_SIGNED = {
     (LeaseStatus.TENANT_SIGNED, SignerRole.TENANT),
     (LeaseStatus.OWNER_SIGNED, SignerRole.OWNER),
}

_RANK = {
     LeaseStatus.DRAFT: 0,
     LeaseStatus.TENANT_SIGNED: 1,
     LeaseStatus.OWNER_SIGNED: 1,
     LeaseStatus.FINALIZED: 2,
}


def _check_exhaustive() -> None:
     for status in LeaseStatus:
          if status is LeaseStatus.FINALIZED:
               continue
          for role in SignerRole:
               key = (status, role)
               if (key in _TRANSITIONS) == (key in _ALREADY_SIGNED):
                    raise RuntimeError(f"Lease transition table does not cover {key}")


_check_exhaustive()


def derive_status(has_tenant_signature: bool, has_owner_signature: bool) -> LeaseStatus:
     if has_tenant_signature and has_owner_signature:
          return LeaseStatus.FINALIZED
     if has_tenant_signature:
          return LeaseStatus.TENANT_SIGNED
     if has_owner_signature:
          return LeaseStatus.OWNER_SIGNED
     return LeaseStatus.DRAFT


def transition(current: LeaseStatus, role: SignerRole) -> LeaseStatus:
     """
     Status reached when `role` signs a lease in `current`.

     Raises:
          AlreadyFinalizedError: the lease is FINALIZED.
          AlreadySignedError: `role` has already signed.
     """
     if current is LeaseStatus.FINALIZED:
          raise AlreadyFinalizedError()
     if (current, role) in _ALREADY_SIGNED:
          if role is SignerRole.TENANT:
               raise AlreadySignedError("The tenant has already signed this lease")
          raise AlreadySignedError("The owner has already signed this lease")
     return _TRANSITIONS[(current, role)]


def ensure_forward(current: LeaseStatus, new: LeaseStatus) -> None:
     """Status never regresses and never jumps sideways between single-signed states."""
     if _RANK[new] < _RANK[current]:
          raise IntegrityFailureError(f"Lease status cannot go from {current.value} back to {new.value}")
     if _RANK[new] == _RANK[current] and new is not current:
          raise IntegrityFailureError(f"Lease status cannot go from {current.value} to {new.value}")
