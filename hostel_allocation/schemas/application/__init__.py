from hostel_allocation.schemas.application.application import (
    ApplicationResponse,
    ApplicationStatusUpdate,
    ApplicationSubmit,
)

__all__ = ["ApplicationResponse", "ApplicationStatusUpdate", "ApplicationSubmit"]
