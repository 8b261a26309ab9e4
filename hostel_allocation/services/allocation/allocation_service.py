"""
Allocation service.

Admin-facing allocation operations: the batch run plus manual create,
update, delete and listing. Every operation that can add a bed to a room
goes through the repository's capacity-conditional writes.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from hostel_allocation.core.exceptions import (
    DuplicateAllocationError,
    GenderMismatchError,
    NotFoundError,
    ValidationError,
)
from hostel_allocation.models.allocation import Allocation
from hostel_allocation.models.base import (
    AllocationStatus,
    ApplicationStatus,
    is_gender_compatible,
    utcnow,
)
from hostel_allocation.models.hostel import Room
from hostel_allocation.repositories.allocation import AllocationRepository
from hostel_allocation.repositories.application import ApplicationRepository
from hostel_allocation.repositories.hostel import RoomRepository
from hostel_allocation.repositories.payment import PaymentRepository
from hostel_allocation.repositories.system import SettingRepository
from hostel_allocation.repositories.user import UserRepository
from hostel_allocation.schemas.allocation import (
    AllocationCreate,
    AllocationDetail,
    AllocationRunRequest,
    AllocationRunResult,
    AllocationRunSettings,
    AllocationUpdate,
)
from hostel_allocation.services.allocation.allocation_matcher import AllocationMatcher
from hostel_allocation.services.allocation.capacity_index import RoomCapacityIndex
from hostel_allocation.services.allocation.eligibility_filter import EligibilityFilter
from hostel_allocation.services.base import BaseService, ServiceResult
from hostel_allocation.services.lifecycle import (
    ALLOCATION_TRANSITIONS,
    ensure_allocation_confirmable,
    ensure_allocation_deletable,
)
from hostel_allocation.services.settings import load_allocation_settings


class AllocationService(BaseService):

    def __init__(self, db_session: Session, default_max_per_run: int = 50):
        super().__init__(db_session)
        self.default_max_per_run = default_max_per_run
        self.allocations = AllocationRepository(db_session)
        self.applications = ApplicationRepository(db_session)
        self.rooms = RoomRepository(db_session)
        self.users = UserRepository(db_session)
        self.payments = PaymentRepository(db_session)
        self.settings = SettingRepository(db_session)

    # -------------------------------------------------------------------------
    # Batch run
    # -------------------------------------------------------------------------

    def resolve_run_settings(self, request: Optional[AllocationRunRequest] = None) -> AllocationRunSettings:
        """Persisted settings overlaid with any values given on the request."""
        settings = load_allocation_settings(self.settings, self.default_max_per_run)
        if request is None:
            return settings
        overrides = request.model_dump(
            include={
                "max_allocations_per_run",
                "prioritize_by_level",
                "prioritize_by_submission_date",
                "priority_order",
            },
            exclude_none=True,
        )
        return settings.model_copy(update=overrides)

    def run_allocation(
        self,
        request: Optional[AllocationRunRequest] = None,
        now: Optional[datetime] = None,
    ) -> ServiceResult[AllocationRunResult]:
        """
        Allocate rooms to eligible applications.

        Selection or snapshot failures abort before any write. Once
        matching starts, per-candidate failures are counted in the result
        and never fail the run; zero matches is a success.
        """
        try:
            settings = self.resolve_run_settings(request)
            application_ids = request.application_ids if request else None
            candidates = EligibilityFilter(self.applications).select(settings, application_ids)
            index = RoomCapacityIndex.build(self.rooms)
            # End the read transaction; each allocation commits on its own.
            self.db.rollback()
        except Exception as e:
            self._rollback()
            return self._handle_exception(e, "prepare allocation run")

        self._logger.info(
            "Allocation run started",
            extra={
                "candidate_count": len(candidates),
                "room_count": len(index),
                "free_beds": index.total_remaining,
            },
        )

        result = AllocationMatcher(self.db, self.allocations, self.rooms).run(candidates, index, now=now)
        result.message = self._run_message(result)

        self._logger.info(
            "Allocation run finished",
            extra={
                "allocated_count": result.allocated_count,
                "total_considered": result.total_considered,
                "skipped_count": result.skipped_count,
                "failed_count": result.failed_count,
                "unmatched_count": result.unmatched_count,
            },
        )
        return ServiceResult.success(result, message=result.message)

    @staticmethod
    def _run_message(result: AllocationRunResult) -> str:
        if result.total_considered == 0:
            return "No eligible applications to allocate"
        message = f"Allocated {result.allocated_count} of {result.total_considered} eligible applications"
        if result.failed_count:
            message += f" ({result.failed_count} failed)"
        return message

    # -------------------------------------------------------------------------
    # Manual operations
    # -------------------------------------------------------------------------

    def create_allocation(self, data: AllocationCreate, now: Optional[datetime] = None) -> ServiceResult[Allocation]:
        """
        Allocate a specific room to a student.

        Without an explicit application the student's latest approved
        application is used.
        """
        try:
            with self.transaction():
                user = self.users.get_by_id(data.user_id)
                room = self._get_active_room(data.room_id)

                if data.application_id:
                    application = self.applications.get_by_id(data.application_id)
                    if application.user_id != user.id:
                        raise ValidationError(
                            "Application does not belong to this student",
                            field_errors={"application_id": ["belongs to another user"]},
                        )
                    if application.application_status != ApplicationStatus.APPROVED:
                        raise ValidationError(
                            "Only approved applications can be allocated",
                            field_errors={"application_id": [application.application_status.value]},
                        )
                else:
                    application = self.applications.find_latest_approved_for_user(user.id)
                    if application is None:
                        raise NotFoundError(
                            "Application",
                            message="No approved application found for this student",
                        )

                gender = user.gender or application.gender
                self._ensure_gender(room, gender)

                existing = self.allocations.find_active_for_user(user.id)
                if existing is not None:
                    raise DuplicateAllocationError(user.id, existing.id)

                allocation = self.allocations.create_if_capacity(
                    user_id=user.id,
                    application_id=application.id,
                    room_id=room.id,
                    now=now or utcnow(),
                )

            self._logger.info(
                "Manual allocation created",
                extra={"allocation_id": allocation.id, "user_id": user.id, "room_id": room.id},
            )
            return ServiceResult.success(allocation, message="Allocation created successfully")
        except Exception as e:
            return self._handle_exception(e, "create allocation", data.user_id)

    def update_allocation(
        self,
        allocation_id: str,
        data: AllocationUpdate,
        now: Optional[datetime] = None,
    ) -> ServiceResult[Allocation]:
        """
        Change an allocation's room and/or status.

        Room moves exclude the allocation itself from the target room's
        occupancy; status changes follow the allocation transition table.
        """
        now = now or utcnow()
        try:
            with self.transaction():
                allocation = self.allocations.get_by_id(allocation_id, for_update=True)

                if data.room_id and data.room_id != allocation.room_id:
                    self._move(allocation, data.room_id)

                if data.status is not None and data.status != allocation.status:
                    self._change_status(allocation, data.status, now)

            self._logger.info(
                "Allocation updated",
                extra={"allocation_id": allocation.id, "status": allocation.status.value, "room_id": allocation.room_id},
            )
            return ServiceResult.success(allocation, message="Allocation updated successfully")
        except Exception as e:
            return self._handle_exception(e, "update allocation", allocation_id)

    def delete_allocation(self, allocation_id: str) -> ServiceResult[Dict[str, Any]]:
        """
        Remove an allocation and free its bed.

        The application keeps its APPROVED status so the student is
        eligible again in the next run.
        """
        try:
            with self.transaction():
                allocation = self.allocations.get_by_id(allocation_id, for_update=True)
                ensure_allocation_deletable(allocation.status)
                payload = {
                    "allocation_id": allocation.id,
                    "user_id": allocation.user_id,
                    "application_id": allocation.application_id,
                    "room_id": allocation.room_id,
                }
                self.allocations.delete(allocation)

            self._logger.info("Allocation deleted", extra=payload)
            return ServiceResult.success(payload, message="Allocation deleted successfully")
        except Exception as e:
            return self._handle_exception(e, "delete allocation", allocation_id)

    def list_allocations(self) -> ServiceResult[List[AllocationDetail]]:
        try:
            rows = [
                AllocationDetail(
                    id=allocation.id,
                    created_at=allocation.created_at,
                    updated_at=allocation.updated_at,
                    user_id=allocation.user_id,
                    application_id=allocation.application_id,
                    room_id=allocation.room_id,
                    status=allocation.status,
                    allocated_at=allocation.allocated_at,
                    confirmed_at=allocation.confirmed_at,
                    user_name=allocation.user.name if allocation.user else None,
                    matric_no=allocation.user.matric_no if allocation.user else None,
                    room_number=allocation.room.number if allocation.room else None,
                    hostel_id=allocation.room.hostel_id if allocation.room else None,
                    hostel_name=allocation.room.hostel.name if allocation.room and allocation.room.hostel else None,
                )
                for allocation in self.allocations.list_with_details()
            ]
            return ServiceResult.success(rows)
        except Exception as e:
            return self._handle_exception(e, "list allocations")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _get_active_room(self, room_id: str) -> Room:
        room = self.rooms.get_with_hostel(room_id)
        if not room.hostel.is_active:
            raise ValidationError(
                "Room belongs to an inactive hostel",
                field_errors={"room_id": ["hostel is not active"]},
            )
        return room

    @staticmethod
    def _ensure_gender(room: Room, gender) -> None:
        if not is_gender_compatible(room.hostel.gender, gender):
            raise GenderMismatchError(
                getattr(gender, "value", gender),
                room.hostel.gender.value,
            )

    def _move(self, allocation: Allocation, room_id: str) -> None:
        room = self._get_active_room(room_id)
        self._ensure_gender(room, allocation.user.gender or allocation.application.gender)
        if allocation.is_active:
            self.allocations.move_if_capacity(allocation, room.id)
        else:
            # Inactive allocations hold no bed, so moving them needs no capacity
            self.allocations.update(allocation, {"room_id": room.id})

    def _change_status(self, allocation: Allocation, target: AllocationStatus, now: datetime) -> None:
        current = allocation.status

        if target == AllocationStatus.CONFIRMED:
            ensure_allocation_confirmable(
                current,
                self.payments.has_completed_payment(allocation.application_id),
            )
            self.allocations.update(allocation, {"status": target, "confirmed_at": now})
            return

        ALLOCATION_TRANSITIONS.ensure(current, target)

        if target == AllocationStatus.ALLOCATED:
            other = self.allocations.find_active_for_user(allocation.user_id)
            if other is not None and other.id != allocation.id:
                raise DuplicateAllocationError(allocation.user_id, other.id)
            room = self.rooms.get_with_hostel(allocation.room_id)
            self._ensure_gender(room, allocation.user.gender or allocation.application.gender)
            self.allocations.reactivate_if_capacity(allocation, now)
            return

        self.allocations.update(allocation, {"status": target, "confirmed_at": None})
