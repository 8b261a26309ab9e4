from hostel_allocation.models.allocation.allocation import Allocation

__all__ = ["Allocation"]
