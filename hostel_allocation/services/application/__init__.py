from hostel_allocation.services.application.application_service import ApplicationService

__all__ = ["ApplicationService"]
