"""
SQLAlchemy models.

Importing this package registers every mapper with ``Base.metadata``.
"""

from hostel_allocation.models.base import Base
from hostel_allocation.models.user import User
from hostel_allocation.models.hostel import Hostel, Room
from hostel_allocation.models.application import Application
from hostel_allocation.models.allocation import Allocation
from hostel_allocation.models.payment import Payment, Refund
from hostel_allocation.models.system import Setting

__all__ = [
    "Base",
    "User",
    "Hostel",
    "Room",
    "Application",
    "Allocation",
    "Payment",
    "Refund",
    "Setting",
]
