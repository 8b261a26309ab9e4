"""
Hostel model.

A hostel is gender-classified and can be switched off; rooms of an
inactive hostel are never offered by the allocation run.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_allocation.models.base import HostelGender, TimestampModel, is_gender_compatible

if TYPE_CHECKING:
    from hostel_allocation.models.hostel.room import Room


class Hostel(TimestampModel):
    """Residence hall owning a set of rooms."""

    __tablename__ = "hostels"

    name: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    gender: Mapped[HostelGender] = mapped_column(
        Enum(HostelGender, name="hostel_gender_enum", native_enum=False, length=10),
        nullable=False,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    rooms: Mapped[List["Room"]] = relationship(
        "Room",
        back_populates="hostel",
        cascade="all, delete-orphan",
        order_by="Room.number",
    )

    def accepts(self, gender) -> bool:
        """True when a student of ``gender`` may be housed here."""
        return is_gender_compatible(self.gender, gender)

    def __repr__(self) -> str:
        return f"<Hostel(id={self.id}, name={self.name}, gender={self.gender})>"
