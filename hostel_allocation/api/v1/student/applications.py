from fastapi import APIRouter, Depends, status

from hostel_allocation.api.deps import get_application_service, get_current_user_id, unwrap_result
from hostel_allocation.core.rate_limiting import rate_limit
from hostel_allocation.schemas.application import ApplicationResponse, ApplicationSubmit
from hostel_allocation.services.application import ApplicationService

router = APIRouter(prefix="/applications")


@router.post(
    "",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(rate_limit("application_submit"))],
)
def submit_application(
    payload: ApplicationSubmit,
    user_id: str = Depends(get_current_user_id),
    service: ApplicationService = Depends(get_application_service),
):
    return unwrap_result(service.submit_application(user_id, payload))


@router.get("/me", response_model=ApplicationResponse)
def my_application(
    user_id: str = Depends(get_current_user_id),
    service: ApplicationService = Depends(get_application_service),
):
    return unwrap_result(service.get_for_user(user_id))
