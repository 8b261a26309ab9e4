"""Admission window status schemas."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from hostel_allocation.schemas.common import BaseSchema


class WindowStatus(str, Enum):
    NOT_STARTED = "not_started"
    OPEN = "open"
    CLOSED = "closed"


class WindowStatusResponse(BaseSchema):
    """Answer of the application / payment status endpoints."""

    status: WindowStatus
    is_open: bool
    start_date: Optional[datetime] = None
    deadline: Optional[datetime] = None
    message: str = Field(..., description="Human readable summary of the window")
