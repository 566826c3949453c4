# routers/applications.py
from fastapi import APIRouter, Depends

from auth import get_current_principal
from dependencies import get_lease_service
from schemas.lease import AcceptApplicationRequest, LeaseCreatedResponse
from services.lease_service import LeaseService, Principal

router = APIRouter(prefix="/api/applications", tags=["applications"])


@router.patch(
     "/{application_id}/accept",
     response_model=LeaseCreatedResponse,
     summary="Accept an application and draft its lease"
)
def accept_application(
     application_id: int,
     body: AcceptApplicationRequest,
     service: LeaseService = Depends(get_lease_service),
     principal: Principal = Depends(get_current_principal),
):
     """
     Accept a submitted application. The listing's landlord provides the
     lease start date and the landlord, property and terms blocks; the end
     date, rent and deposit come from the listing. The DRAFT lease and its
     annex documents are created with the acceptance.
     """
     lease, annexes = service.accept_application(application_id, principal, body)
     return LeaseCreatedResponse(
          message="Application accepted, lease created",
          lease_id=lease.id,
          status=lease.status,
          application_id=application_id,
          start_date=lease.start_date,
          end_date=lease.end_date,
          annex_ids=[annex.id for annex in annexes],
     )
