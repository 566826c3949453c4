# routers/annexes.py
"""Annex document routes: creation and listing per lease, signing per annex."""
from fastapi import APIRouter, Depends, Request

from auth import get_current_principal
from dependencies import get_annex_service
from schemas.annex import (
     AnnexListResponse,
     AnnexResponse,
     AnnexSignatureResponse,
     AnnexSignRequest,
     AnnexSignResponse,
)
from services.annex_service import AnnexService
from services.lease_service import Principal
from utils.request_meta import client_ip, user_agent

router = APIRouter(prefix="/api", tags=["annexes"])


@router.post(
     "/leases/{lease_id}/annexes",
     response_model=AnnexListResponse,
     summary="Create the default annexes of a lease"
)
def create_annexes(
     lease_id: int,
     service: AnnexService = Depends(get_annex_service),
     principal: Principal = Depends(get_current_principal),
):
     """Idempotent: a lease that already has annexes gets them back unchanged."""
     annexes = service.create_for_lease(lease_id, principal)
     return AnnexListResponse(
          message="Annex documents ready",
          annexes=[AnnexResponse.model_validate(annex) for annex in annexes],
     )


@router.get(
     "/leases/{lease_id}/annexes",
     response_model=AnnexListResponse,
     summary="List the annexes of a lease"
)
def list_annexes(
     lease_id: int,
     service: AnnexService = Depends(get_annex_service),
     principal: Principal = Depends(get_current_principal),
):
     annexes = service.list_annexes(lease_id, principal)
     return AnnexListResponse(
          message=f"{len(annexes)} annex documents",
          annexes=[AnnexResponse.model_validate(annex) for annex in annexes],
     )


@router.post(
     "/annexes/{annex_id}/sign",
     response_model=AnnexSignResponse,
     summary="Sign an annex document"
)
def sign_annex(
     annex_id: int,
     body: AnnexSignRequest,
     request: Request,
     service: AnnexService = Depends(get_annex_service),
     principal: Principal = Depends(get_current_principal),
):
     signature = service.sign_annex(
          annex_id,
          principal,
          consent_given=body.consent_given,
          ip_address=client_ip(request),
          user_agent=user_agent(request),
     )
     return AnnexSignResponse(
          message="Annex document signed",
          signature=AnnexSignatureResponse.model_validate(signature),
     )
