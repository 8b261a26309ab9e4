"""
Base schema classes with common fields and configurations.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "BaseSchema",
    "BaseCreateSchema",
    "BaseUpdateSchema",
    "BaseResponseSchema",
    "MessageResponse",
]


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.

    All request and response schemas inherit from this so ORM objects can
    be validated directly (``from_attributes``).
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=False,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class BaseCreateSchema(BaseSchema):
    """Base schema for create operations."""
    pass


class BaseUpdateSchema(BaseSchema):
    """
    Base schema for update operations.

    Subclasses intended for partial updates declare their fields as
    Optional[...] with defaults.
    """
    pass


class BaseResponseSchema(BaseSchema):
    """Base schema for API responses of persisted entities."""

    id: str = Field(..., description="Unique identifier")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(default=None, description="Last update timestamp")


class MessageResponse(BaseSchema):
    success: bool = True
    message: str
