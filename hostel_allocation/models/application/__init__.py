from hostel_allocation.models.application.application import Application

__all__ = ["Application"]
