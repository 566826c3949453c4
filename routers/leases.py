# routers/leases.py
"""
Lease API routes.

Both parties of a lease (tenant and landlord) can read it, sign their own
side and fetch the sealed document. Creation routes are landlord-only.
Domain errors propagate to the LeaseError handler registered in main.py.
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import Response

from auth import get_current_principal
from dependencies import get_lease_service
from schemas.lease import (
     DocumentVerificationResponse,
     FinalizeResponse,
     LeaseCreatedResponse,
     LeaseFromApplicationCreate,
     LeaseResponse,
     ManualLeaseCreate,
     PaymentTermsResponse,
     SignatureResponse,
     SignLeaseRequest,
     SignLeaseResponse,
)
from schemas.audit import AuditLogResponse, AuditTrailResponse
from services.lease_service import FinalizeResult, LeaseService, Principal, SignResult
from utils.request_meta import client_ip, user_agent

router = APIRouter(prefix="/api/leases", tags=["leases"])


# ---------------------------------------------------------------------------
# Response builders
# ---------------------------------------------------------------------------

def _finalize_response(result: FinalizeResult) -> FinalizeResponse:
     return FinalizeResponse(
          message="Lease already finalized" if result.already_finalized else "Lease finalized successfully",
          document_id=result.document_id,
          document_hash=result.document_hash,
          pdf_url=result.pdf_url,
          finalized_at=result.finalized_at,
          already_finalized=result.already_finalized,
     )


def _sign_response(message: str, result: SignResult) -> SignLeaseResponse:
     return SignLeaseResponse(
          message=message,
          status=result.status,
          signature=SignatureResponse.model_validate(result.signature),
          finalization=_finalize_response(result.finalization) if result.finalization else None,
     )


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------

@router.post(
     "/from-application",
     response_model=LeaseCreatedResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Create a lease for an accepted application"
)
def create_lease_from_application(
     body: LeaseFromApplicationCreate,
     service: LeaseService = Depends(get_lease_service),
     principal: Principal = Depends(get_current_principal),
):
     lease = service.create_from_application(principal, body)
     return LeaseCreatedResponse(
          message="Lease created successfully",
          lease_id=lease.id,
          status=lease.status,
          application_id=lease.application_id,
          start_date=lease.start_date,
          end_date=lease.end_date,
     )


@router.post(
     "/manual",
     response_model=LeaseCreatedResponse,
     status_code=status.HTTP_201_CREATED,
     summary="Create a lease without an application"
)
def create_manual_lease(
     body: ManualLeaseCreate,
     service: LeaseService = Depends(get_lease_service),
     principal: Principal = Depends(get_current_principal),
):
     """
     Create a DRAFT lease for one of the landlord's listings.

     - **listingId**: listing the lease is for (must belong to the caller)
     - **tenantId** / **tenantEmail** / **tenantName**: the tenant party
     - **startDate**, **endDate**, **monthlyRent**, **deposit**, **terms**
     """
     lease = service.create_manual(principal, body)
     return LeaseCreatedResponse(
          message="Lease created successfully",
          lease_id=lease.id,
          status=lease.status,
          start_date=lease.start_date,
          end_date=lease.end_date,
     )


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

@router.get(
     "/{lease_id}",
     response_model=LeaseResponse,
     summary="Get a lease"
)
def get_lease(
     lease_id: int,
     service: LeaseService = Depends(get_lease_service),
     principal: Principal = Depends(get_current_principal),
):
     return LeaseResponse.model_validate(service.get_lease(lease_id, principal))


@router.get(
     "/{lease_id}/audit-log",
     response_model=AuditTrailResponse,
     summary="Audit trail of a lease and its annexes"
)
def get_audit_log(
     lease_id: int,
     service: LeaseService = Depends(get_lease_service),
     principal: Principal = Depends(get_current_principal),
):
     entries = service.audit_trail(lease_id, principal)
     return AuditTrailResponse(
          lease_id=lease_id,
          entries=[AuditLogResponse.model_validate(entry) for entry in entries],
          total=len(entries),
     )


@router.get(
     "/{lease_id}/payment-terms",
     response_model=PaymentTermsResponse,
     summary="Rent figures and next due date of a finalized lease"
)
def get_payment_terms(
     lease_id: int,
     last_due_date: Optional[date] = Query(None, alias="lastDueDate"),
     service: LeaseService = Depends(get_lease_service),
     principal: Principal = Depends(get_current_principal),
):
     return PaymentTermsResponse(**service.payment_terms(lease_id, principal, last_due_date))


# ---------------------------------------------------------------------------
# Signatures and sealing
# ---------------------------------------------------------------------------

@router.post(
     "/{lease_id}/sign-tenant",
     response_model=SignLeaseResponse,
     summary="Sign the lease as tenant"
)
def sign_as_tenant(
     lease_id: int,
     body: SignLeaseRequest,
     request: Request,
     service: LeaseService = Depends(get_lease_service),
     principal: Principal = Depends(get_current_principal),
):
     result = service.submit_tenant_signature(
          lease_id,
          principal,
          consent_given=body.consent_given,
          initials=body.initials,
          ip_address=client_ip(request),
          user_agent=user_agent(request),
     )
     return _sign_response("Lease signed by the tenant", result)


@router.post(
     "/{lease_id}/sign-owner",
     response_model=SignLeaseResponse,
     summary="Sign the lease as owner"
)
def sign_as_owner(
     lease_id: int,
     body: SignLeaseRequest,
     request: Request,
     service: LeaseService = Depends(get_lease_service),
     principal: Principal = Depends(get_current_principal),
):
     result = service.submit_owner_signature(
          lease_id,
          principal,
          consent_given=body.consent_given,
          initials=body.initials,
          ip_address=client_ip(request),
          user_agent=user_agent(request),
     )
     return _sign_response("Lease signed by the owner", result)


@router.post(
     "/{lease_id}/finalize",
     response_model=FinalizeResponse,
     summary="Render, hash and seal a fully signed lease"
)
def finalize_lease(
     lease_id: int,
     service: LeaseService = Depends(get_lease_service),
     principal: Principal = Depends(get_current_principal),
):
     """
     Seal the lease document. Safe to retry: a sealed lease returns its
     existing document descriptors with `already_finalized` set.
     """
     return _finalize_response(service.finalize(lease_id, principal))


@router.get(
     "/{lease_id}/pdf",
     response_class=Response,
     summary="Fetch the sealed lease document"
)
def get_lease_pdf(
     lease_id: int,
     request: Request,
     download: bool = Query(False),
     service: LeaseService = Depends(get_lease_service),
     principal: Principal = Depends(get_current_principal),
):
     referer = request.headers.get("referer") or ""
     document = service.get_document(lease_id, principal, download=download or "download" in referer)
     return Response(
          content=document.data,
          media_type=document.content_type,
          headers={
               "Content-Disposition": f'inline; filename="{document.filename}"',
               "Cache-Control": "private, max-age=3600",
          },
     )


@router.get(
     "/{lease_id}/verify",
     response_model=DocumentVerificationResponse,
     summary="Check the stored document against its sealed hash"
)
def verify_lease_document(
     lease_id: int,
     service: LeaseService = Depends(get_lease_service),
     principal: Principal = Depends(get_current_principal),
):
     lease, valid, message = service.verify_document(lease_id, principal)
     return DocumentVerificationResponse(
          lease_id=lease.id,
          document_id=lease.document_id,
          document_hash=lease.document_hash,
          valid=valid,
          message=message,
     )
