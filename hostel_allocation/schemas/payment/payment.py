"""Payment request/response schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from hostel_allocation.models.base import PaymentStatus, RefundStatus
from hostel_allocation.schemas.common import BaseResponseSchema, BaseSchema


class PaymentInitializeRequest(BaseSchema):
    application_id: str = Field(..., min_length=1)


class PaymentInitializeResponse(BaseSchema):
    payment_id: str
    reference: str
    authorization_url: str
    amount: Decimal
    currency: str
    demo_mode: bool = False


class PaymentVerifyRequest(BaseSchema):
    reference: str = Field(..., min_length=1)


class PaymentReasonRequest(BaseSchema):
    """Body of the reject and refund endpoints; the reason is mandatory."""

    reason: str = Field(..., min_length=1, max_length=500)


class PaymentResponse(BaseResponseSchema):
    application_id: str
    user_id: str
    reference: str
    amount: Decimal
    currency: str
    status: PaymentStatus
    transaction_id: Optional[str] = None
    paid_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    refunded_at: Optional[datetime] = None
    refunded_by: Optional[str] = None
    refund_reason: Optional[str] = None


class RefundResponse(BaseResponseSchema):
    payment_id: str
    amount: Decimal
    reason: str
    status: RefundStatus
    requested_by: Optional[str] = None
    requested_at: datetime


class WebhookAck(BaseSchema):
    received: bool = True
    processed: bool = False
