"""Public window status endpoints used by the student portal."""

from fastapi import APIRouter, Depends

from hostel_allocation.api.deps import get_time_window_service
from hostel_allocation.schemas.settings import WindowStatusResponse
from hostel_allocation.services.settings import TimeWindowService

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("/application-status", response_model=WindowStatusResponse)
def application_status(service: TimeWindowService = Depends(get_time_window_service)):
    return service.application_window()


@router.get("/payment-status", response_model=WindowStatusResponse)
def payment_status(service: TimeWindowService = Depends(get_time_window_service)):
    return service.payment_window()
