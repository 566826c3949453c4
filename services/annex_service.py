# services/annex_service.py
"""
Annex Service - secondary consent documents attached to a lease.

Every lease gets the same fixed set of annexes at version 1. Creation is
idempotent: once any annex exists for a lease the existing set is returned
untouched. Annex signatures are independent per signer and drive no status.
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import AnnexDocument, AnnexSignature, AnnexType, AuditAction, AuditEntity, Lease, SignerRole
from services import audit_service
from services.errors import AlreadySignedError, ForbiddenError, LeaseValidationError, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_ANNEXES = (
     (
          AnnexType.PAYMENT_CONSENT,
          "Online Payment Consent",
          "By signing this document you authorize the automatic collection of the monthly "
          "rent through the secure payment system. This authorization is optional and may "
          "be revoked at any time.",
     ),
     (
          AnnexType.CREDIT_CHECK_AUTH,
          "Credit Check Authorization",
          "By signing this document you authorize the landlord to run a credit check to "
          "assess your solvency. The check is carried out in accordance with the laws "
          "protecting personal information.",
     ),
     (
          AnnexType.ELECTRONIC_COMMS,
          "Electronic Communications Consent",
          "By signing this document you agree to receive electronic communications "
          "(emails, notifications) about your lease and your tenancy through the platform.",
     ),
)


class AnnexService:
     """Service class for annex documents and their signatures."""

     def __init__(self, db: Session):
          self.db = db

     def _existing(self, lease_id: int) -> List[AnnexDocument]:
          return (
               self.db.query(AnnexDocument)
               .filter(AnnexDocument.lease_id == lease_id)
               .order_by(AnnexDocument.id)
               .all()
          )

     def _load_lease(self, lease_id: int) -> Lease:
          lease = self.db.get(Lease, lease_id)
          if lease is None:
               raise NotFoundError(f"Lease {lease_id} not found")
          return lease

     def create_annexes(self, lease_id: int, actor_id: Optional[int] = None) -> List[AnnexDocument]:
          """
          Create the default annexes for a lease, or return the ones it has.

          A concurrent creator losing the (lease_id, type) uniqueness race gets
          the winner's set back.
          """
          existing = self._existing(lease_id)
          if existing:
               return existing

          annexes = [
               AnnexDocument(lease_id=lease_id, type=annex_type, title=title, content=content, version=1)
               for annex_type, title, content in DEFAULT_ANNEXES
          ]
          try:
               with self.db.begin_nested():
                    self.db.add_all(annexes)
          except IntegrityError:
               logger.info("Annexes for lease %s were created concurrently", lease_id)
               return self._existing(lease_id)

          for annex in annexes:
               audit_service.record(
                    self.db,
                    AuditAction.ANNEX_CREATED,
                    AuditEntity.ANNEX,
                    actor_id=actor_id,
                    lease_id=lease_id,
                    annex_id=annex.id,
                    entity_id=annex.id,
                    metadata={"annexType": annex.type},
               )
          logger.info("Created %d annexes for lease %s", len(annexes), lease_id)
          return annexes

     def create_for_lease(self, lease_id: int, principal) -> List[AnnexDocument]:
          lease = self._load_lease(lease_id)
          if not lease.is_landlord(principal.id):
               raise ForbiddenError("Only the landlord of this lease can create its annexes")
          return self.create_annexes(lease.id, principal.id)

     def list_annexes(self, lease_id: int, principal) -> List[AnnexDocument]:
          lease = self._load_lease(lease_id)
          if not (lease.is_tenant(principal.id) or lease.is_landlord(principal.id)):
               raise ForbiddenError()
          return self._existing(lease.id)

     def sign_annex(
          self,
          annex_id: int,
          principal,
          consent_given: bool,
          ip_address: Optional[str] = None,
          user_agent: Optional[str] = None,
     ) -> AnnexSignature:
          if consent_given is not True:
               raise LeaseValidationError("You must give your consent to sign")

          annex = self.db.get(AnnexDocument, annex_id)
          if annex is None:
               raise NotFoundError(f"Annex {annex_id} not found")
          lease = annex.lease
          if lease.is_tenant(principal.id):
               signer_role = SignerRole.TENANT
          elif lease.is_landlord(principal.id):
               signer_role = SignerRole.OWNER
          else:
               raise ForbiddenError("You are not a party to this annex's lease")

          already = (
               self.db.query(AnnexSignature.id)
               .filter(AnnexSignature.annex_id == annex.id, AnnexSignature.signer_id == principal.id)
               .first()
          )
          if already is not None:
               raise AlreadySignedError("You have already signed this document")

          signature = AnnexSignature(
               annex_id=annex.id,
               signer_id=principal.id,
               signer_email=principal.email,
               signer_name=principal.name,
               signer_role=signer_role,
               consent_given=True,
               ip_address=ip_address,
               user_agent=user_agent,
               document_version=annex.version,
          )
          try:
               with self.db.begin_nested():
                    self.db.add(signature)
          except IntegrityError as exc:
               raise AlreadySignedError("You have already signed this document") from exc

          audit_service.record(
               self.db,
               AuditAction.ANNEX_SIGNED,
               AuditEntity.ANNEX,
               actor_id=principal.id,
               lease_id=lease.id,
               annex_id=annex.id,
               entity_id=annex.id,
               metadata={
                    "annexType": annex.type,
                    "ipAddress": ip_address,
                    "userAgent": user_agent,
                    "documentVersion": annex.version,
               },
          )
          return signature
