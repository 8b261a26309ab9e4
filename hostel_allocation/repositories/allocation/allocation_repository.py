"""
Allocation repository.

Every write that can raise a room's occupancy is a single conditional
statement (INSERT ... SELECT / UPDATE ... WHERE occupancy < capacity)
issued after locking the room row, so concurrent allocation runs and
manual admin allocations cannot jointly overfill a room.
"""

from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import insert, literal, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from hostel_allocation.core.exceptions import (
    CapacityExceededError,
    DuplicateAllocationError,
    RepositoryError,
)
from hostel_allocation.core.logging import get_logger
from hostel_allocation.models.allocation import Allocation
from hostel_allocation.models.base import (
    ACTIVE_ALLOCATION_STATUSES,
    AllocationStatus,
    utcnow,
)
from hostel_allocation.models.hostel import Room
from hostel_allocation.repositories.base import BaseRepository
from hostel_allocation.repositories.hostel.room_repository import occupancy_subquery

logger = get_logger(__name__)


class AllocationRepository(BaseRepository[Allocation]):

    def __init__(self, session: Session):
        super().__init__(Allocation, session)

    # ==================== Reads ====================

    def find_active_for_user(self, user_id: str) -> Optional[Allocation]:
        stmt = select(Allocation).where(
            Allocation.user_id == user_id,
            Allocation.status.in_(ACTIVE_ALLOCATION_STATUSES),
        )
        return self.db.execute(stmt).scalars().first()

    def find_current_for_application(self, application_id: str) -> Optional[Allocation]:
        """Latest non-rejected allocation of an application."""
        stmt = (
            select(Allocation)
            .where(
                Allocation.application_id == application_id,
                Allocation.status != AllocationStatus.REJECTED,
            )
            .order_by(Allocation.allocated_at.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_with_details(self) -> List[Allocation]:
        stmt = (
            select(Allocation)
            .options(
                joinedload(Allocation.user),
                joinedload(Allocation.room).joinedload(Room.hostel),
            )
            .order_by(Allocation.allocated_at.desc(), Allocation.id)
        )
        return list(self.db.execute(stmt).scalars().unique().all())

    # ==================== Capacity-conditional writes ====================

    def create_if_capacity(
        self,
        user_id: str,
        application_id: str,
        room_id: str,
        now: Optional[datetime] = None,
    ) -> Allocation:
        """
        Insert an ALLOCATED allocation only if the room still has a free bed.

        Raises:
            CapacityExceededError: the room was full when the write ran
            DuplicateAllocationError: the user already holds an active allocation
        """
        now = now or utcnow()
        allocation_id = str(uuid4())
        table = Allocation.__table__
        rooms = Room.__table__

        self.db.flush()
        self._lock_room(room_id)

        values = [
            (table.c.id, allocation_id),
            (table.c.user_id, user_id),
            (table.c.application_id, application_id),
            (table.c.room_id, room_id),
            (table.c.status, AllocationStatus.ALLOCATED),
            (table.c.allocated_at, now),
            (table.c.created_at, now),
            (table.c.updated_at, now),
        ]
        guarded_select = (
            select(*[literal(value, type_=column.type) for column, value in values])
            .select_from(rooms)
            .where(rooms.c.id == room_id)
            .where(occupancy_subquery(room_id) < rooms.c.capacity)
        )
        stmt = insert(table).from_select([column for column, _ in values], guarded_select)

        try:
            inserted = self.db.execute(stmt).rowcount
        except IntegrityError as e:
            if "unique" in str(e.orig).lower():
                raise DuplicateAllocationError(user_id) from e
            raise RepositoryError(f"Allocation insert failed: {str(e)}") from e
        except SQLAlchemyError as e:
            raise RepositoryError(f"Allocation insert failed: {str(e)}") from e

        if inserted == 0:
            raise CapacityExceededError(room_id)

        logger.debug(
            "Allocation inserted",
            extra={"allocation_id": allocation_id, "user_id": user_id, "room_id": room_id},
        )
        return self.get_by_id(allocation_id)

    def move_if_capacity(self, allocation: Allocation, room_id: str) -> Allocation:
        """Point an allocation at another room if that room has space for it."""
        return self._conditional_update(
            allocation,
            room_id=room_id,
            values={"room_id": room_id},
            exclude_self=True,
        )

    def reactivate_if_capacity(self, allocation: Allocation, now: Optional[datetime] = None) -> Allocation:
        """Move an inactive allocation back to ALLOCATED if its room has space."""
        now = now or utcnow()
        return self._conditional_update(
            allocation,
            room_id=allocation.room_id,
            values={
                "status": AllocationStatus.ALLOCATED,
                "allocated_at": now,
                "confirmed_at": None,
            },
            exclude_self=True,
        )

    def _conditional_update(self, allocation: Allocation, room_id: str, values: dict, exclude_self: bool) -> Allocation:
        table = Allocation.__table__
        self.db.flush()
        self._lock_room(room_id)

        capacity = select(Room.capacity).where(Room.id == room_id).scalar_subquery()
        occupancy = occupancy_subquery(room_id, allocation.id if exclude_self else None)
        stmt = (
            update(table)
            .where(table.c.id == allocation.id)
            .where(occupancy < capacity)
            .values(updated_at=utcnow(), **values)
        )

        try:
            updated = self.db.execute(stmt).rowcount
        except IntegrityError as e:
            if "unique" in str(e.orig).lower():
                raise DuplicateAllocationError(allocation.user_id, allocation.id) from e
            raise RepositoryError(f"Allocation update failed: {str(e)}") from e
        except SQLAlchemyError as e:
            raise RepositoryError(f"Allocation update failed: {str(e)}") from e

        if updated == 0:
            raise CapacityExceededError(room_id)

        self.db.refresh(allocation)
        return allocation

    def _lock_room(self, room_id: str) -> None:
        self.db.execute(select(Room.id).where(Room.id == room_id).with_for_update()).first()
