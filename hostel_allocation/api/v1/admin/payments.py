"""Admin payment actions. Reject and refund require a reason."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from hostel_allocation.api.deps import get_actor_id, get_payment_service, unwrap_result
from hostel_allocation.models.base import PaymentStatus
from hostel_allocation.schemas.payment import PaymentReasonRequest, PaymentResponse
from hostel_allocation.services.payment import PaymentService

router = APIRouter(prefix="/payments")


@router.get("", response_model=List[PaymentResponse])
def list_payments(
    status: Optional[PaymentStatus] = None,
    service: PaymentService = Depends(get_payment_service),
):
    return unwrap_result(service.list_payments(status))


@router.post("/{payment_id}/confirm", response_model=PaymentResponse)
def confirm_payment(
    payment_id: str,
    actor_id: Optional[str] = Depends(get_actor_id),
    service: PaymentService = Depends(get_payment_service),
):
    return unwrap_result(service.confirm_payment(payment_id, actor_id=actor_id))


@router.post("/{payment_id}/reject", response_model=PaymentResponse)
def reject_payment(
    payment_id: str,
    payload: PaymentReasonRequest,
    actor_id: Optional[str] = Depends(get_actor_id),
    service: PaymentService = Depends(get_payment_service),
):
    return unwrap_result(service.reject_payment(payment_id, payload.reason, actor_id=actor_id))


@router.post("/{payment_id}/refund", response_model=PaymentResponse)
def refund_payment(
    payment_id: str,
    payload: PaymentReasonRequest,
    actor_id: Optional[str] = Depends(get_actor_id),
    service: PaymentService = Depends(get_payment_service),
):
    return unwrap_result(service.refund_payment(payment_id, payload.reason, actor_id=actor_id))
