from hostel_allocation.repositories.application.application_repository import ApplicationRepository

__all__ = ["ApplicationRepository"]
