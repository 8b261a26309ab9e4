from fastapi import APIRouter, Depends

from hostel_allocation.api.deps import get_current_user_id, get_payment_service, unwrap_result
from hostel_allocation.core.rate_limiting import rate_limit
from hostel_allocation.schemas.payment import (
    PaymentInitializeRequest,
    PaymentInitializeResponse,
    PaymentResponse,
    PaymentVerifyRequest,
)
from hostel_allocation.services.payment import PaymentService

router = APIRouter(prefix="/payments")


@router.post("/initialize", response_model=PaymentInitializeResponse)
def initialize_payment(
    payload: PaymentInitializeRequest,
    user_id: str = Depends(get_current_user_id),
    service: PaymentService = Depends(get_payment_service),
):
    return unwrap_result(service.initialize_payment(user_id, payload.application_id))


@router.post(
    "/verify",
    response_model=PaymentResponse,
    dependencies=[Depends(rate_limit("payment_verify"))],
)
def verify_payment(
    payload: PaymentVerifyRequest,
    user_id: str = Depends(get_current_user_id),
    service: PaymentService = Depends(get_payment_service),
):
    return unwrap_result(service.verify_payment(payload.reference, user_id=user_id))
