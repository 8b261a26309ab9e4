from hostel_allocation.models.user.user import User

__all__ = ["User"]
