from typing import List, Optional

from fastapi import APIRouter, Depends

from hostel_allocation.api.deps import get_application_service, unwrap_result
from hostel_allocation.models.base import ApplicationStatus
from hostel_allocation.schemas.application import ApplicationResponse, ApplicationStatusUpdate
from hostel_allocation.services.application import ApplicationService

router = APIRouter(prefix="/applications")


@router.get("", response_model=List[ApplicationResponse])
def list_applications(
    status: Optional[ApplicationStatus] = None,
    service: ApplicationService = Depends(get_application_service),
):
    return unwrap_result(service.list_applications(status))


@router.patch("/{application_id}/status", response_model=ApplicationResponse)
def update_application_status(
    application_id: str,
    payload: ApplicationStatusUpdate,
    service: ApplicationService = Depends(get_application_service),
):
    return unwrap_result(service.update_status(application_id, payload))
