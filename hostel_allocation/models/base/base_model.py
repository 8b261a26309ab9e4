"""
Declarative base and the abstract model classes every table builds on.
"""

from datetime import datetime, timezone
from typing import TypeVar
from uuid import uuid4

from sqlalchemy import String, event
from sqlalchemy.orm import Mapped, declarative_base, mapped_column
from sqlalchemy.sql import func

from hostel_allocation.models.base.types import UTCDateTime

Base = declarative_base()

ModelType = TypeVar("ModelType", bound="BaseModel")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel(Base):
    """Abstract model with a UUID string primary key."""

    __abstract__ = True

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid4()),
        comment="Primary key (UUID)",
    )

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={getattr(self, 'id', None)})>"


class TimestampModel(BaseModel):
    """Abstract model with created/updated timestamps."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )


@event.listens_for(TimestampModel, "before_update", propagate=True)
def touch_updated_at(mapper, connection, target):
    target.updated_at = utcnow()
