"""
FastAPI dependencies.

Everything a route needs is reached through ``request.app.state``, which
the application lifespan populates; nothing here holds module state.

Identity is asserted by the upstream gateway through the ``X-User-Id``
(student) and ``X-Actor-Id`` (admin) headers.
"""

from typing import Generator, Optional

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from hostel_allocation.config.settings import Settings
from hostel_allocation.db import Database
from hostel_allocation.services.allocation import AllocationService
from hostel_allocation.services.application import ApplicationService
from hostel_allocation.services.base import ServiceResult
from hostel_allocation.services.payment import PaymentService, PaystackGateway
from hostel_allocation.services.settings import TimeWindowService


# --- Application state ---------------------------------------------------------

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Generator[Session, None, None]:
    database: Database = request.app.state.database
    with database.session() as db:
        yield db


def get_gateway(request: Request) -> PaystackGateway:
    return request.app.state.gateway


# --- Identity -----------------------------------------------------------------

def get_current_user_id(x_user_id: str = Header(..., alias="X-User-Id")) -> str:
    return x_user_id


def get_actor_id(x_actor_id: Optional[str] = Header(None, alias="X-Actor-Id")) -> Optional[str]:
    return x_actor_id


# --- Services -----------------------------------------------------------------

def get_time_window_service(db: Session = Depends(get_db)) -> TimeWindowService:
    return TimeWindowService(db)


def get_application_service(db: Session = Depends(get_db)) -> ApplicationService:
    return ApplicationService(db)


def get_allocation_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> AllocationService:
    return AllocationService(db, default_max_per_run=settings.DEFAULT_MAX_ALLOCATIONS_PER_RUN)


def get_payment_service(
    db: Session = Depends(get_db),
    gateway: PaystackGateway = Depends(get_gateway),
    settings: Settings = Depends(get_app_settings),
) -> PaymentService:
    # Paystack signs webhooks with the account's secret key
    return PaymentService(db, gateway, webhook_secret=settings.PAYSTACK_SECRET_KEY)


# --- Results ------------------------------------------------------------------

def unwrap_result(result: ServiceResult):
    """Return the data of a successful result or raise the matching HTTP error."""
    if result.is_success:
        return result.data
    error = result.error
    raise HTTPException(
        status_code=result.status_code,
        detail={
            "message": result.message,
            "code": error.code.value if error else None,
            "details": error.details if error else None,
        },
    )


__all__ = [
    "get_app_settings",
    "get_db",
    "get_gateway",
    "get_current_user_id",
    "get_actor_id",
    "get_time_window_service",
    "get_application_service",
    "get_allocation_service",
    "get_payment_service",
    "unwrap_result",
]
