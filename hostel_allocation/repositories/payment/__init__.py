from hostel_allocation.repositories.payment.payment_repository import (
    PaymentRepository,
    RefundRepository,
)

__all__ = ["PaymentRepository", "RefundRepository"]
