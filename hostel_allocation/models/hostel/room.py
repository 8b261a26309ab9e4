"""
Room model.

Capacity is fixed; occupancy is never stored. It is always derived as
the number of ALLOCATED or CONFIRMED allocations pointing at the room.
"""

from typing import TYPE_CHECKING, List

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_allocation.models.base import TimestampModel

if TYPE_CHECKING:
    from hostel_allocation.models.allocation.allocation import Allocation
    from hostel_allocation.models.hostel.hostel import Hostel


class Room(TimestampModel):
    """Physical room inside a hostel."""

    __tablename__ = "rooms"
    __table_args__ = (
        UniqueConstraint("hostel_id", "number", name="uq_rooms_hostel_number"),
        CheckConstraint("capacity > 0", name="ck_rooms_capacity_positive"),
    )

    hostel_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    number: Mapped[str] = mapped_column(String(20), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)

    hostel: Mapped["Hostel"] = relationship("Hostel", back_populates="rooms")
    allocations: Mapped[List["Allocation"]] = relationship(
        "Allocation",
        back_populates="room",
    )

    def __repr__(self) -> str:
        return f"<Room(id={self.id}, number={self.number}, capacity={self.capacity})>"
