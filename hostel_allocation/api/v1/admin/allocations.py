"""Admin allocation endpoints: batch run and manual management."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, status

from hostel_allocation.api.deps import get_actor_id, get_allocation_service, unwrap_result
from hostel_allocation.core.logging import get_logger
from hostel_allocation.schemas.allocation import (
    AllocationCreate,
    AllocationDetail,
    AllocationResponse,
    AllocationRunRequest,
    AllocationRunResult,
    AllocationUpdate,
)
from hostel_allocation.services.allocation import AllocationService

logger = get_logger(__name__)

router = APIRouter(prefix="/allocations")


@router.post("/run", response_model=AllocationRunResult)
def run_allocation(
    payload: Optional[AllocationRunRequest] = Body(None),
    actor_id: Optional[str] = Depends(get_actor_id),
    service: AllocationService = Depends(get_allocation_service),
):
    logger.info("Allocation run requested", extra={"actor": actor_id})
    return unwrap_result(service.run_allocation(payload))


@router.get("", response_model=List[AllocationDetail])
def list_allocations(service: AllocationService = Depends(get_allocation_service)):
    return unwrap_result(service.list_allocations())


@router.post("", response_model=AllocationResponse, status_code=status.HTTP_201_CREATED)
def create_allocation(
    payload: AllocationCreate,
    service: AllocationService = Depends(get_allocation_service),
):
    return unwrap_result(service.create_allocation(payload))


@router.patch("/{allocation_id}", response_model=AllocationResponse)
def update_allocation(
    allocation_id: str,
    payload: AllocationUpdate,
    service: AllocationService = Depends(get_allocation_service),
):
    return unwrap_result(service.update_allocation(allocation_id, payload))


@router.delete("/{allocation_id}")
def delete_allocation(
    allocation_id: str,
    service: AllocationService = Depends(get_allocation_service),
) -> Dict[str, Any]:
    return unwrap_result(service.delete_allocation(allocation_id))
