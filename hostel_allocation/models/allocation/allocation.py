"""
Allocation model.

Binds one user, through one application, to one room. A partial unique
index keeps at most one ALLOCATED/CONFIRMED allocation per user at the
database level.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Enum, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_allocation.models.base import AllocationStatus, TimestampModel, UTCDateTime, utcnow

if TYPE_CHECKING:
    from hostel_allocation.models.application.application import Application
    from hostel_allocation.models.hostel.room import Room
    from hostel_allocation.models.user.user import User

_ACTIVE_PREDICATE = "status IN ('ALLOCATED', 'CONFIRMED')"


class Allocation(TimestampModel):
    """Room assignment for a student."""

    __tablename__ = "allocations"
    __table_args__ = (
        Index(
            "uq_allocations_active_user",
            "user_id",
            unique=True,
            sqlite_where=text(_ACTIVE_PREDICATE),
            postgresql_where=text(_ACTIVE_PREDICATE),
        ),
        Index("ix_allocations_room_status", "room_id", "status"),
    )

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    application_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("applications.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    room_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("rooms.id", ondelete="RESTRICT"),
        nullable=False,
    )
    status: Mapped[AllocationStatus] = mapped_column(
        Enum(AllocationStatus, name="allocation_status_enum", native_enum=False, length=10),
        nullable=False,
        default=AllocationStatus.ALLOCATED,
    )
    allocated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
    )
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(),
        nullable=True,
    )

    user: Mapped["User"] = relationship("User", back_populates="allocations")
    application: Mapped["Application"] = relationship("Application", back_populates="allocations")
    room: Mapped["Room"] = relationship("Room", back_populates="allocations")

    @property
    def is_active(self) -> bool:
        return self.status in (AllocationStatus.ALLOCATED, AllocationStatus.CONFIRMED)

    def __repr__(self) -> str:
        return f"<Allocation(id={self.id}, user_id={self.user_id}, room_id={self.room_id}, status={self.status})>"
