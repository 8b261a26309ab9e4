from hostel_allocation.schemas.payment.payment import (
    PaymentInitializeRequest,
    PaymentInitializeResponse,
    PaymentReasonRequest,
    PaymentResponse,
    PaymentVerifyRequest,
    RefundResponse,
    WebhookAck,
)

__all__ = [
    "PaymentInitializeRequest",
    "PaymentInitializeResponse",
    "PaymentReasonRequest",
    "PaymentResponse",
    "PaymentVerifyRequest",
    "RefundResponse",
    "WebhookAck",
]
