"""
Room repository.

Occupancy is never stored: every read derives it from the ALLOCATED and
CONFIRMED allocations pointing at the room.
"""

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased, joinedload

from hostel_allocation.core.exceptions import RepositoryError
from hostel_allocation.models.allocation import Allocation
from hostel_allocation.models.base import ACTIVE_ALLOCATION_STATUSES
from hostel_allocation.models.hostel import Hostel, Room
from hostel_allocation.repositories.base import BaseRepository


@dataclass(frozen=True)
class RoomOccupancyRow:
    """Plain snapshot of one room of an active hostel."""

    room_id: str
    room_number: str
    capacity: int
    occupancy: int
    hostel_id: str
    hostel_name: str
    hostel_gender: str
    hostel_is_active: bool


def occupancy_subquery(room_id, exclude_allocation_id: Optional[str] = None):
    """
    Scalar subquery counting active allocations of ``room_id``.

    Uses its own alias of the allocations table so it never correlates
    with an enclosing INSERT or UPDATE on the same table.
    """
    occupying = aliased(Allocation, name="occupying")
    stmt = select(func.count(occupying.id)).where(
        occupying.room_id == room_id,
        occupying.status.in_(ACTIVE_ALLOCATION_STATUSES),
    )
    if exclude_allocation_id is not None:
        stmt = stmt.where(occupying.id != exclude_allocation_id)
    return stmt.scalar_subquery()


class RoomRepository(BaseRepository[Room]):

    def __init__(self, session: Session):
        super().__init__(Room, session)

    def get_with_hostel(self, room_id: str) -> Room:
        room = self.db.execute(
            select(Room).options(joinedload(Room.hostel)).where(Room.id == room_id)
        ).scalar_one_or_none()
        if room is None:
            return self.get_by_id(room_id)
        return room

    def count_occupancy(self, room_id: str, exclude_allocation_id: Optional[str] = None) -> int:
        try:
            stmt = select(func.count(Allocation.id)).where(
                Allocation.room_id == room_id,
                Allocation.status.in_(ACTIVE_ALLOCATION_STATUSES),
            )
            if exclude_allocation_id is not None:
                stmt = stmt.where(Allocation.id != exclude_allocation_id)
            return int(self.db.execute(stmt).scalar_one())
        except SQLAlchemyError as e:
            raise RepositoryError(f"Occupancy count failed: {str(e)}") from e

    def find_active_with_occupancy(self) -> List[RoomOccupancyRow]:
        """
        Rooms of active hostels with their derived occupancy.

        Returned in no particular order; callers impose their own.
        """
        try:
            stmt = (
                select(
                    Room.id,
                    Room.number,
                    Room.capacity,
                    Hostel.id.label("hostel_id"),
                    Hostel.name.label("hostel_name"),
                    Hostel.gender.label("hostel_gender"),
                    Hostel.is_active.label("hostel_is_active"),
                    func.count(Allocation.id).label("occupancy"),
                )
                .join(Hostel, Room.hostel_id == Hostel.id)
                .outerjoin(
                    Allocation,
                    and_(
                        Allocation.room_id == Room.id,
                        Allocation.status.in_(ACTIVE_ALLOCATION_STATUSES),
                    ),
                )
                .where(Hostel.is_active.is_(True))
                .group_by(
                    Room.id,
                    Room.number,
                    Room.capacity,
                    Hostel.id,
                    Hostel.name,
                    Hostel.gender,
                    Hostel.is_active,
                )
            )
            rows = self.db.execute(stmt).all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Room occupancy query failed: {str(e)}") from e

        return [
            RoomOccupancyRow(
                room_id=row.id,
                room_number=row.number,
                capacity=row.capacity,
                occupancy=int(row.occupancy),
                hostel_id=row.hostel_id,
                hostel_name=row.hostel_name,
                hostel_gender=getattr(row.hostel_gender, "value", row.hostel_gender),
                hostel_is_active=bool(row.hostel_is_active),
            )
            for row in rows
        ]
