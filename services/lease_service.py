# services/lease_service.py
"""
Lease Service - lease creation, dual signature and document sealing.

Concurrency rests on the database, not on in-process locks:
- signature uniqueness per (lease, role) is a unique constraint; losing an
  insert race surfaces as AlreadySignedError
- sign and finalize lock the lease row (SELECT ... FOR UPDATE where the
  engine supports it) so the status recompute and the seal write happen
  against a consistent view
- the status is recomputed from the signature rows after every insert

Callers own the transaction: the service flushes, the request session
commits or rolls back.
"""
import logging
import time
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import (
     AnnexDocument,
     Application,
     ApplicationStatus,
     AuditAction,
     AuditEntity,
     AuditLog,
     Lease,
     LeaseOrigin,
     LeaseSignature,
     LeaseStatus,
     Listing,
     SignerRole,
)
from schemas.lease import AcceptApplicationRequest, LeaseFromApplicationCreate, ManualLeaseCreate, clean_initials
from services import audit_service
from services.annex_service import AnnexService
from services.artifact_store import ArtifactStore
from services.document_hash import compute_document_hash, generate_document_id, verify_document
from services.document_renderer import (
     PDF_CONTENT_TYPE,
     LeaseSnapshot,
     SignatureSnapshot,
     render_lease_document,
)
from services.errors import (
     AlreadySignedError,
     ForbiddenError,
     IntegrityFailureError,
     LeaseValidationError,
     NotFinalizedError,
     NotFoundError,
     SignaturesIncompleteError,
     StorageFailureError,
)
from services.lease_calendar import lease_end_date, next_rent_due_date
from services.lease_state import derive_status, ensure_forward, transition

logger = logging.getLogger(__name__)

_SIGN_ACTIONS = {
     SignerRole.TENANT: AuditAction.LEASE_TENANT_SIGNED,
     SignerRole.OWNER: AuditAction.LEASE_OWNER_SIGNED,
}


@dataclass(frozen=True)
class Principal:
     """Authenticated caller as resolved by the identity layer."""
     id: int
     role: str
     email: str
     name: Optional[str] = None


@dataclass
class SignResult:
     status: LeaseStatus
     signature: LeaseSignature
     finalization: Optional["FinalizeResult"] = None


@dataclass
class FinalizeResult:
     document_id: str
     document_hash: str
     pdf_url: str
     finalized_at: datetime
     already_finalized: bool


@dataclass
class DocumentPayload:
     data: bytes
     filename: str
     content_type: str = PDF_CONTENT_TYPE


class LeaseService:
     """Service class for the lease lifecycle."""

     def __init__(
          self,
          db: Session,
          store: ArtifactStore,
          renderer: Callable[[LeaseSnapshot], bytes] = render_lease_document,
          auto_finalize: bool = False,
     ):
          self.db = db
          self.store = store
          self.renderer = renderer
          self.auto_finalize = auto_finalize

     # ------------------------------------------------------------------
     # Loading and access checks
     # ------------------------------------------------------------------

     def _load_lease(self, lease_id: int, for_update: bool = False) -> Lease:
          query = self.db.query(Lease).filter(Lease.id == lease_id)
          if for_update:
               query = query.with_for_update()
          lease = query.first()
          if lease is None:
               raise NotFoundError(f"Lease {lease_id} not found")
          return lease

     @staticmethod
     def _require_party(lease: Lease, principal: Principal) -> SignerRole:
          if lease.is_tenant(principal.id):
               return SignerRole.TENANT
          if lease.is_landlord(principal.id):
               return SignerRole.OWNER
          raise ForbiddenError("You are not a party to this lease")

     def _signatures(self, lease_id: int) -> Dict[SignerRole, LeaseSignature]:
          rows = self.db.query(LeaseSignature).filter(LeaseSignature.lease_id == lease_id).all()
          return {row.signer_role: row for row in rows}

     def _signed_roles(self, lease_id: int) -> set:
          rows = (
               self.db.query(LeaseSignature.signer_role)
               .filter(LeaseSignature.lease_id == lease_id)
               .all()
          )
          return {row[0] for row in rows}

     def get_lease(self, lease_id: int, principal: Principal) -> Lease:
          lease = self._load_lease(lease_id)
          self._require_party(lease, principal)
          return lease

     # ------------------------------------------------------------------
     # Creation
     # ------------------------------------------------------------------

     def _record_created(self, lease: Lease, actor_id: int) -> None:
          audit_service.record(
               self.db,
               AuditAction.LEASE_CREATED,
               AuditEntity.LEASE,
               actor_id=actor_id,
               lease_id=lease.id,
               entity_id=lease.id,
               metadata={
                    "origin": lease.origin,
                    "applicationId": lease.application_id,
                    "monthlyRent": lease.monthly_rent,
                    "deposit": lease.deposit,
               },
          )

     def _insert_lease(self, lease: Lease) -> Lease:
          try:
               with self.db.begin_nested():
                    self.db.add(lease)
          except IntegrityError as exc:
               raise LeaseValidationError("A lease already exists for this application") from exc
          return lease

     def accept_application(
          self,
          application_id: int,
          principal: Principal,
          data: AcceptApplicationRequest,
          today: Optional[date] = None,
     ) -> Tuple[Lease, List[AnnexDocument]]:
          """
          Accept a submitted application and draft its lease.

          The application is marked ACCEPTED, and the DRAFT lease and its
          annexes are created in the caller's transaction. Rent comes from the listing; the deposit
          defaults to one month's rent.
          """
          today = today or date.today()
          if data.start_date < today:
               raise LeaseValidationError("The start date cannot be in the past")

          application = self.db.get(Application, application_id)
          if application is None:
               raise NotFoundError(f"Application {application_id} not found")
          listing = application.listing
          if listing.landlord_user_id != principal.id:
               raise ForbiddenError("Only the listing's landlord can accept this application")
          if application.status != ApplicationStatus.SUBMITTED:
               raise LeaseValidationError("Only submitted applications can be accepted")
          if application.lease is not None:
               raise LeaseValidationError("A lease already exists for this application")

          application.mark_as_accepted()
          lease = Lease(
               origin=LeaseOrigin.APPLICATION,
               application_id=application.id,
               listing_id=listing.id,
               tenant_user_id=application.tenant_user_id,
               tenant_email=application.tenant_email,
               tenant_name=application.tenant_name,
               landlord_user_id=listing.landlord_user_id,
               landlord_email=listing.landlord_email,
               landlord_name=listing.landlord_name,
               start_date=data.start_date,
               end_date=lease_end_date(data.start_date, listing.min_term_months),
               monthly_rent=listing.price,
               deposit=listing.deposit if listing.deposit is not None else listing.price,
               terms=f"{listing.min_term_months or 12}-month lease. Standard residential rental conditions.",
               landlord_info=data.landlord_info.model_dump(exclude_none=True),
               property_info=data.property_info.model_dump(exclude_none=True),
               lease_terms=data.lease_terms.model_dump(exclude_none=True),
               additional_conditions=data.additional_conditions,
               status=LeaseStatus.DRAFT,
          )
          self._insert_lease(lease)
          self._record_created(lease, principal.id)
          annexes = AnnexService(self.db).create_annexes(lease.id, principal.id)
          logger.info("Application %s accepted, lease %s drafted", application.id, lease.id)
          return lease, annexes

     def create_from_application(self, principal: Principal, data: LeaseFromApplicationCreate) -> Lease:
          application = self.db.get(Application, data.application_id)
          if application is None:
               raise NotFoundError(f"Application {data.application_id} not found")
          listing = application.listing
          if listing.landlord_user_id != principal.id:
               raise ForbiddenError("Only the listing's landlord can create this lease")
          if application.status != ApplicationStatus.ACCEPTED:
               raise LeaseValidationError("The application must be accepted before a lease is created")
          if application.lease is not None:
               raise LeaseValidationError("A lease already exists for this application")

          lease = Lease(
               origin=LeaseOrigin.APPLICATION,
               application_id=application.id,
               listing_id=listing.id,
               tenant_user_id=application.tenant_user_id,
               tenant_email=application.tenant_email,
               tenant_name=application.tenant_name,
               landlord_user_id=listing.landlord_user_id,
               landlord_email=listing.landlord_email,
               landlord_name=listing.landlord_name,
               start_date=data.start_date,
               end_date=data.end_date,
               monthly_rent=data.monthly_rent,
               deposit=data.deposit,
               terms=data.terms,
               landlord_info=listing.landlord_snapshot(),
               property_info=listing.property_snapshot(),
               lease_terms=self._terms_block(data),
               status=LeaseStatus.DRAFT,
          )
          self._insert_lease(lease)
          self._record_created(lease, principal.id)
          return lease

     def create_manual(self, principal: Principal, data: ManualLeaseCreate) -> Lease:
          """Manual lease: no application behind it, parties come from the request."""
          listing = self.db.get(Listing, data.listing_id)
          if listing is None:
               raise NotFoundError(f"Listing {data.listing_id} not found")
          if listing.landlord_user_id != principal.id:
               raise ForbiddenError("Only the listing's landlord can create a lease for it")
          if data.tenant_user_id == principal.id:
               raise LeaseValidationError("The tenant and the landlord must be different people")

          lease = Lease(
               origin=LeaseOrigin.MANUAL,
               listing_id=listing.id,
               tenant_user_id=data.tenant_user_id,
               tenant_email=data.tenant_email,
               tenant_name=data.tenant_name,
               landlord_user_id=listing.landlord_user_id,
               landlord_email=listing.landlord_email,
               landlord_name=listing.landlord_name,
               start_date=data.start_date,
               end_date=data.end_date,
               monthly_rent=data.monthly_rent,
               deposit=data.deposit,
               terms=data.terms,
               landlord_info=listing.landlord_snapshot(),
               property_info=listing.property_snapshot(),
               lease_terms=self._terms_block(data),
               status=LeaseStatus.DRAFT,
          )
          self._insert_lease(lease)
          self._record_created(lease, principal.id)
          return lease

     @staticmethod
     def _terms_block(data) -> dict:
          return {
               "monthlyRent": str(data.monthly_rent),
               "deposit": str(data.deposit),
               "startDate": data.start_date.isoformat(),
               "endDate": data.end_date.isoformat(),
          }

     # ------------------------------------------------------------------
     # Signatures
     # ------------------------------------------------------------------

     def submit_tenant_signature(
          self,
          lease_id: int,
          principal: Principal,
          consent_given: bool,
          initials: Optional[str] = None,
          ip_address: Optional[str] = None,
          user_agent: Optional[str] = None,
     ) -> SignResult:
          return self._submit_signature(
               SignerRole.TENANT, lease_id, principal, consent_given, initials, ip_address, user_agent
          )

     def submit_owner_signature(
          self,
          lease_id: int,
          principal: Principal,
          consent_given: bool,
          initials: Optional[str] = None,
          ip_address: Optional[str] = None,
          user_agent: Optional[str] = None,
     ) -> SignResult:
          return self._submit_signature(
               SignerRole.OWNER, lease_id, principal, consent_given, initials, ip_address, user_agent
          )

     def _submit_signature(
          self,
          role: SignerRole,
          lease_id: int,
          principal: Principal,
          consent_given: bool,
          initials: Optional[str],
          ip_address: Optional[str],
          user_agent: Optional[str],
     ) -> SignResult:
          if consent_given is not True:
               raise LeaseValidationError("You must give your consent to sign")
          try:
               initials = clean_initials(initials)
          except ValueError as exc:
               raise LeaseValidationError(str(exc)) from exc

          lease = self._load_lease(lease_id, for_update=True)
          if self._require_party(lease, principal) is not role:
               if role is SignerRole.TENANT:
                    raise ForbiddenError("Only the tenant of this lease can sign as tenant")
               raise ForbiddenError("Only the landlord of this lease can sign as owner")

          roles = self._signed_roles(lease.id)
          transition(derive_status(SignerRole.TENANT in roles, SignerRole.OWNER in roles), role)

          signature = LeaseSignature(
               lease_id=lease.id,
               signer_role=role,
               signer_id=principal.id,
               signer_email=principal.email,
               signer_name=principal.name,
               initials=initials,
               consent_given=True,
               ip_address=ip_address,
               user_agent=user_agent,
               document_version=lease.pdf_version,
          )
          try:
               with self.db.begin_nested():
                    self.db.add(signature)
          except IntegrityError as exc:
               logger.info("Duplicate %s signature rejected for lease %s", role.value, lease.id)
               if role is SignerRole.TENANT:
                    raise AlreadySignedError("The tenant has already signed this lease") from exc
               raise AlreadySignedError("The owner has already signed this lease") from exc

          roles = self._signed_roles(lease.id)
          new_status = derive_status(SignerRole.TENANT in roles, SignerRole.OWNER in roles)
          ensure_forward(lease.status, new_status)
          lease.status = new_status
          self.db.flush()

          audit_service.record(
               self.db,
               _SIGN_ACTIONS[role],
               AuditEntity.LEASE,
               actor_id=principal.id,
               lease_id=lease.id,
               entity_id=lease.id,
               metadata={
                    "ipAddress": ip_address,
                    "userAgent": user_agent,
                    "documentVersion": lease.pdf_version,
                    "initials": signature.initials,
               },
          )
          logger.info("Lease %s signed by %s, status now %s", lease.id, role.value, new_status.value)

          result = SignResult(status=new_status, signature=signature)
          if new_status is LeaseStatus.FINALIZED and self.auto_finalize:
               result.finalization = self._chain_finalize(lease.id, principal)
          return result

     def _chain_finalize(self, lease_id: int, principal: Principal) -> Optional[FinalizeResult]:
          """Seal right after the second signature; a failure leaves the lease signed and retriable."""
          try:
               with self.db.begin_nested():
                    return self.finalize(lease_id, principal)
          except StorageFailureError:
               logger.exception("Automatic finalization of lease %s failed; finalize can be retried", lease_id)
               return None

     # ------------------------------------------------------------------
     # Finalization
     # ------------------------------------------------------------------

     def _snapshot(self, lease: Lease, document_id: str, signatures: Dict[SignerRole, LeaseSignature]) -> LeaseSnapshot:
          def _sig(role: SignerRole) -> Optional[SignatureSnapshot]:
               row = signatures.get(role)
               if row is None:
                    return None
               return SignatureSnapshot(
                    role=role.value,
                    signer_name=row.signer_name,
                    signer_email=row.signer_email,
                    initials=row.initials,
                    consent_given=row.consent_given,
                    signed_at=row.signed_at,
                    document_version=row.document_version,
               )

          return LeaseSnapshot(
               lease_id=lease.id,
               document_id=document_id,
               document_version=lease.pdf_version,
               tenant_name=lease.tenant_name,
               tenant_email=lease.tenant_email,
               start_date=lease.start_date,
               end_date=lease.end_date,
               monthly_rent=lease.monthly_rent,
               deposit=lease.deposit,
               terms=lease.terms,
               landlord_info=dict(lease.landlord_info or {}),
               property_info=dict(lease.property_info or {}),
               lease_terms=dict(lease.lease_terms or {}),
               additional_conditions=lease.additional_conditions,
               tenant_signature=_sig(SignerRole.TENANT),
               owner_signature=_sig(SignerRole.OWNER),
          )

     def finalize(self, lease_id: int, principal: Principal) -> FinalizeResult:
          """
          Render, hash, store and seal the lease document.

          Idempotent: a sealed lease returns its existing descriptors and
          writes nothing. Nothing on the lease changes until the document is
          rendered and stored, so a StorageFailureError leaves it as it was.
          """
          lease = self._load_lease(lease_id, for_update=True)
          self._require_party(lease, principal)

          signatures = self._signatures(lease.id)
          if SignerRole.TENANT not in signatures or SignerRole.OWNER not in signatures:
               raise SignaturesIncompleteError()

          if not lease.has_consistent_seal:
               raise IntegrityFailureError(f"Lease {lease.id} has a partial seal")
          if lease.is_sealed:
               return self._existing_seal(lease)

          # Derived from the lease so every retry reuses the same identifier.
          document_id = generate_document_id(lease.id, lease.pdf_version, lease.created_at)
          snapshot = self._snapshot(lease, document_id, signatures)
          try:
               data = self.renderer(snapshot)
          except Exception as exc:
               logger.exception("Rendering lease %s failed", lease.id)
               raise StorageFailureError("The lease document could not be generated; please retry") from exc

          document_hash = compute_document_hash(data)
          filename = f"lease-{lease.id}-v{lease.pdf_version}-{int(time.time() * 1000)}.pdf"
          try:
               pdf_url = self.store.put(data, filename)
          except Exception as exc:
               logger.exception("Storing lease %s document failed", lease.id)
               raise StorageFailureError("The lease document could not be stored; please retry") from exc

          ensure_forward(lease.status, LeaseStatus.FINALIZED)
          # Only an unsealed row can be sealed; a concurrent finalize that got
          # there first leaves nothing to update.
          sealed = (
               self.db.query(Lease)
               .filter(Lease.id == lease.id, Lease.document_id.is_(None))
               .update(Lease.seal_values(document_id, document_hash, pdf_url), synchronize_session=False)
          )
          self.db.refresh(lease)
          if not sealed:
               logger.warning("Lease %s was sealed concurrently; stored document %s is unused", lease.id, pdf_url)
               return self._existing_seal(lease)

          metadata = {
               "documentId": document_id,
               "documentHash": document_hash,
               "pdfVersion": lease.pdf_version,
          }
          audit_service.record(
               self.db, AuditAction.LEASE_FINALIZED, AuditEntity.LEASE,
               actor_id=principal.id, lease_id=lease.id, entity_id=lease.id,
               metadata={**metadata, "pdfUrl": pdf_url},
          )
          audit_service.record(
               self.db, AuditAction.PDF_GENERATED, AuditEntity.LEASE,
               actor_id=principal.id, lease_id=lease.id, entity_id=document_id,
               metadata={**metadata, "filename": filename, "size": len(data)},
          )
          logger.info("Lease %s finalized as %s", lease.id, document_id)
          return FinalizeResult(
               document_id=document_id,
               document_hash=document_hash,
               pdf_url=pdf_url,
               finalized_at=lease.finalized_at,
               already_finalized=False,
          )

     def _existing_seal(self, lease: Lease) -> FinalizeResult:
          if lease.status is not LeaseStatus.FINALIZED:
               raise IntegrityFailureError(f"Lease {lease.id} is sealed but not finalized")
          return FinalizeResult(
               document_id=lease.document_id,
               document_hash=lease.document_hash,
               pdf_url=lease.pdf_url,
               finalized_at=lease.finalized_at,
               already_finalized=True,
          )

     # ------------------------------------------------------------------
     # Sealed document
     # ------------------------------------------------------------------

     def _sealed_lease(self, lease_id: int, principal: Principal) -> Lease:
          lease = self._load_lease(lease_id)
          self._require_party(lease, principal)
          if lease.status is not LeaseStatus.FINALIZED or not lease.pdf_url:
               raise NotFinalizedError()
          if not lease.is_sealed:
               raise IntegrityFailureError(f"Lease {lease.id} is finalized with a partial seal")
          return lease

     def _fetch(self, lease: Lease) -> bytes:
          try:
               return self.store.get(lease.pdf_url)
          except Exception as exc:
               logger.exception("Fetching document for lease %s failed", lease.id)
               raise StorageFailureError("The lease document could not be retrieved; please retry") from exc

     def get_document(self, lease_id: int, principal: Principal, download: bool = False) -> DocumentPayload:
          lease = self._sealed_lease(lease_id, principal)
          data = self._fetch(lease)
          audit_service.record(
               self.db,
               AuditAction.PDF_DOWNLOADED if download else AuditAction.PDF_VIEWED,
               AuditEntity.LEASE,
               actor_id=principal.id,
               lease_id=lease.id,
               entity_id=lease.document_id,
               metadata={"documentId": lease.document_id, "pdfVersion": lease.pdf_version},
          )
          return DocumentPayload(data=data, filename=f"lease-{lease.document_id}.pdf")

     def verify_document(self, lease_id: int, principal: Principal) -> Tuple[Lease, bool, str]:
          lease = self._sealed_lease(lease_id, principal)
          valid, message = verify_document(self._fetch(lease), lease.document_hash)
          if not valid:
               logger.error("Sealed document for lease %s failed verification: %s", lease.id, message)
          return lease, valid, message

     # ------------------------------------------------------------------
     # Read models
     # ------------------------------------------------------------------

     def audit_trail(self, lease_id: int, principal: Principal) -> List[AuditLog]:
          lease = self.get_lease(lease_id, principal)
          return audit_service.list_for_lease(self.db, lease.id)

     def payment_terms(self, lease_id: int, principal: Principal, last_due_date: Optional[date] = None) -> dict:
          lease = self.get_lease(lease_id, principal)
          if lease.status is not LeaseStatus.FINALIZED:
               raise NotFinalizedError("The lease must be finalized before payments are scheduled")
          return {
               "lease_id": lease.id,
               "monthly_rent": lease.monthly_rent,
               "deposit": lease.deposit,
               "start_date": lease.start_date,
               "end_date": lease.end_date,
               "next_due_date": next_rent_due_date(lease.start_date, lease.end_date, last_due_date),
          }
