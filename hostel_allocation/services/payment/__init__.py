from hostel_allocation.services.payment.payment_gateway import (
    GatewayCheckout,
    GatewayVerification,
    PaystackGateway,
    is_real_secret_key,
    to_minor_units,
)
from hostel_allocation.services.payment.payment_service import PaymentService, generate_reference

__all__ = [
    "GatewayCheckout",
    "GatewayVerification",
    "PaystackGateway",
    "PaymentService",
    "generate_reference",
    "is_real_secret_key",
    "to_minor_units",
]
