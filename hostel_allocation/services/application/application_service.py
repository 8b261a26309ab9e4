"""
Application service.

Student submission (gated by the application window) and the admin
review transitions. Gender and academic level are taken from the user
record at submission time, never from the request body.
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from hostel_allocation.core.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
)
from hostel_allocation.models.application import Application
from hostel_allocation.models.base import ApplicationStatus, PaymentStatus, utcnow
from hostel_allocation.repositories.application import ApplicationRepository
from hostel_allocation.repositories.hostel import HostelRepository
from hostel_allocation.repositories.user import UserRepository
from hostel_allocation.schemas.application import ApplicationStatusUpdate, ApplicationSubmit
from hostel_allocation.services.base import BaseService, ServiceResult
from hostel_allocation.services.lifecycle import APPLICATION_TRANSITIONS
from hostel_allocation.services.settings import APPLICATION_WINDOW, TimeWindowService
from hostel_allocation.utils.academic_level import level_for_student


class ApplicationService(BaseService):

    def __init__(self, db_session: Session):
        super().__init__(db_session)
        self.applications = ApplicationRepository(db_session)
        self.users = UserRepository(db_session)
        self.hostels = HostelRepository(db_session)
        self.windows = TimeWindowService(db_session)

    def submit_application(
        self,
        user_id: str,
        data: ApplicationSubmit,
        now: Optional[datetime] = None,
    ) -> ServiceResult[Application]:
        now = now or utcnow()
        try:
            self.windows.require_open(APPLICATION_WINDOW, now)

            with self.transaction():
                user = self.users.get_by_id(user_id)
                if user.gender is None:
                    raise ValidationError(
                        "Set your gender on your profile before applying",
                        field_errors={"gender": ["missing on profile"]},
                    )
                level = level_for_student(user.admission_year, user.matric_no, now)
                if level is None:
                    raise ValidationError(
                        "Admission year could not be determined from your profile",
                        field_errors={"admission_year": ["missing on profile"]},
                    )

                live = self.applications.find_live_for_user(user.id)
                if live is not None:
                    raise ConflictError(
                        "You already have an application in progress",
                        {"application_id": live.id, "status": live.application_status.value},
                    )

                self._check_preferences(data.hostel_preferences)
                if data.roommate_user_id:
                    self._check_roommate(user.id, data.roommate_user_id)

                application = self.applications.create(
                    Application(
                        user_id=user.id,
                        hostel_preferences=list(data.hostel_preferences),
                        gender=user.gender,
                        level=level,
                        application_status=ApplicationStatus.PENDING,
                        payment_status=PaymentStatus.PENDING,
                        roommate_user_id=data.roommate_user_id,
                        notes=data.notes,
                        submitted_at=now,
                    )
                )

            self._logger.info(
                "Application submitted",
                extra={"application_id": application.id, "user_id": user.id, "level": level.value},
            )
            return ServiceResult.success(application, message="Application submitted successfully")
        except Exception as e:
            return self._handle_exception(e, "submit application", user_id)

    def update_status(self, application_id: str, data: ApplicationStatusUpdate) -> ServiceResult[Application]:
        """Admin approve / reject; REJECTED is final."""
        try:
            with self.transaction():
                application = self.applications.get_by_id(application_id, for_update=True)
                APPLICATION_TRANSITIONS.ensure(application.application_status, data.status)
                self.applications.update(application, {"application_status": data.status})

            self._logger.info(
                "Application status changed",
                extra={"application_id": application.id, "status": data.status.value},
            )
            return ServiceResult.success(application, message=f"Application {data.status.value.lower()}")
        except Exception as e:
            return self._handle_exception(e, "update application status", application_id)

    def get_for_user(self, user_id: str) -> ServiceResult[Application]:
        application = self.applications.find_live_for_user(user_id)
        if application is None:
            return ServiceResult.not_found("Application")
        return ServiceResult.success(application)

    def list_applications(self, status: Optional[ApplicationStatus] = None) -> ServiceResult[List[Application]]:
        try:
            return ServiceResult.success(self.applications.list_with_users(status))
        except Exception as e:
            return self._handle_exception(e, "list applications")

    def _check_preferences(self, hostel_ids: List[str]) -> None:
        missing = [hostel_id for hostel_id in hostel_ids if self.hostels.find_by_id(hostel_id) is None]
        if missing:
            raise ValidationError(
                "Unknown hostel in preferences",
                field_errors={"hostel_preferences": missing},
            )

    def _check_roommate(self, user_id: str, roommate_user_id: str) -> None:
        if roommate_user_id == user_id:
            raise ValidationError(
                "You cannot request yourself as a roommate",
                field_errors={"roommate_user_id": ["must be another student"]},
            )
        if self.users.find_by_id(roommate_user_id) is None:
            raise NotFoundError("User", roommate_user_id, message="Requested roommate does not exist")
