from hostel_allocation.repositories.allocation.allocation_repository import AllocationRepository

__all__ = ["AllocationRepository"]
