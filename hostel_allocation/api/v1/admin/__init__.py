from fastapi import APIRouter

from hostel_allocation.api.v1.admin import allocations, applications, payments

router = APIRouter(prefix="/admin", tags=["Admin"])
router.include_router(allocations.router)
router.include_router(applications.router)
router.include_router(payments.router)

__all__ = ["router"]
