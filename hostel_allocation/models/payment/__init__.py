from hostel_allocation.models.payment.payment import Payment
from hostel_allocation.models.payment.refund import Refund

__all__ = ["Payment", "Refund"]
