from fastapi import APIRouter

from hostel_allocation.api.v1.student import applications, payments

router = APIRouter(prefix="/student", tags=["Student"])
router.include_router(applications.router)
router.include_router(payments.router)

__all__ = ["router"]
