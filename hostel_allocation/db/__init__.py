from hostel_allocation.db.session import Database

__all__ = ["Database"]
