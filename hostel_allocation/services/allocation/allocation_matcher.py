"""
Greedy allocation matcher.

Walks the candidates in priority order and gives each the first room of
the capacity index that accepts the student's gender and still has a
bed. Every allocation is committed on its own, guarded by the
repository's capacity-conditional insert; a failing candidate is logged,
counted and skipped so the run always completes.
"""

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from hostel_allocation.core.exceptions import (
    BaseAppException,
    CapacityExceededError,
    DuplicateAllocationError,
    RepositoryError,
)
from hostel_allocation.models.base import utcnow
from hostel_allocation.repositories.allocation import AllocationRepository
from hostel_allocation.repositories.hostel import RoomRepository
from hostel_allocation.schemas.allocation import AllocationRunResult, AllocationSummary
from hostel_allocation.services.allocation.capacity_index import RoomCapacityIndex
from hostel_allocation.services.allocation.eligibility_filter import Candidate
from hostel_allocation.services.base import BaseService


class AllocationMatcher(BaseService):

    def __init__(
        self,
        db_session: Session,
        allocation_repository: Optional[AllocationRepository] = None,
        room_repository: Optional[RoomRepository] = None,
    ):
        super().__init__(db_session)
        self.allocations = allocation_repository or AllocationRepository(db_session)
        self.rooms = room_repository or RoomRepository(db_session)

    def run(
        self,
        candidates: Iterable[Candidate],
        index: RoomCapacityIndex,
        now: Optional[datetime] = None,
    ) -> AllocationRunResult:
        now = now or utcnow()
        result = AllocationRunResult()
        self._logger.add_context(run_started_at=now.isoformat())
        try:
            for candidate in candidates:
                self._match(candidate, index, result, now)
        finally:
            self._logger.clear_context()
        return result

    def _match(
        self,
        candidate: Candidate,
        index: RoomCapacityIndex,
        result: AllocationRunResult,
        now: datetime,
    ) -> None:
        result.total_considered += 1

        if not candidate.gender:
            result.skipped_count += 1
            self._logger.warning(
                "Skipping candidate without gender",
                extra={"application_id": candidate.application_id, "user_id": candidate.user_id},
            )
            return

        slot = index.first_available(candidate.gender)
        if slot is None:
            result.unmatched_count += 1
            self._logger.info(
                "No compatible room with free capacity",
                extra={"application_id": candidate.application_id, "gender": candidate.gender},
            )
            return

        try:
            with self.transaction():
                allocation = self.allocations.create_if_capacity(
                    user_id=candidate.user_id,
                    application_id=candidate.application_id,
                    room_id=slot.room_id,
                    now=now,
                )
        except CapacityExceededError:
            result.failed_count += 1
            try:
                fresh = self.rooms.count_occupancy(slot.room_id)
            except RepositoryError:
                fresh = slot.capacity
            index.refresh(slot.room_id, fresh)
            self._logger.warning(
                "Room filled up concurrently, candidate left for a later run",
                extra={
                    "application_id": candidate.application_id,
                    "room_id": slot.room_id,
                    "occupancy": fresh,
                    "capacity": slot.capacity,
                },
            )
            return
        except DuplicateAllocationError:
            result.failed_count += 1
            self._logger.warning(
                "Student was allocated concurrently",
                extra={"application_id": candidate.application_id, "user_id": candidate.user_id},
            )
            return
        except BaseAppException as e:
            result.failed_count += 1
            self._logger.error(
                f"Allocation failed for candidate: {e.message}",
                extra={"application_id": candidate.application_id, "error_code": e.error_code.value},
            )
            return
        except Exception:
            # One broken row must not abort the batch
            result.failed_count += 1
            self._logger.exception(
                "Unexpected error while allocating candidate",
                extra={"application_id": candidate.application_id},
            )
            return

        index.reserve(slot.room_id)
        result.allocated_count += 1
        result.allocations.append(
            AllocationSummary(
                allocation_id=allocation.id,
                application_id=candidate.application_id,
                user_id=candidate.user_id,
                room_id=slot.room_id,
                hostel_id=slot.hostel_id,
            )
        )
        self._logger.info(
            "Allocated room",
            extra={
                "allocation_id": allocation.id,
                "application_id": candidate.application_id,
                "room_id": slot.room_id,
                "remaining": slot.remaining,
            },
        )
