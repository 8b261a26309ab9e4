"""Application repository."""

from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import exists, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from hostel_allocation.core.exceptions import RepositoryError
from hostel_allocation.models.allocation import Allocation
from hostel_allocation.models.application import Application
from hostel_allocation.models.base import (
    ACTIVE_ALLOCATION_STATUSES,
    ApplicationStatus,
    PaymentStatus,
)
from hostel_allocation.models.user import User
from hostel_allocation.repositories.base import BaseRepository


class ApplicationRepository(BaseRepository[Application]):

    def __init__(self, session: Session):
        super().__init__(Application, session)

    def find_eligible(
        self,
        order_by: Sequence[Any],
        limit: Optional[int] = None,
        application_ids: Optional[Sequence[str]] = None,
    ) -> List[Tuple[Application, User]]:
        """
        Approved and paid applications whose user holds no active allocation.

        Args:
            order_by: ORDER BY clauses, applied as given
            limit: Row cap applied in SQL
            application_ids: Restrict to these ids (None means no restriction)
        """
        if application_ids is not None and len(application_ids) == 0:
            return []

        holds_bed = exists().where(
            Allocation.user_id == Application.user_id,
            Allocation.status.in_(ACTIVE_ALLOCATION_STATUSES),
        )
        stmt = (
            select(Application, User)
            .join(User, Application.user_id == User.id)
            .where(
                Application.application_status == ApplicationStatus.APPROVED,
                Application.payment_status == PaymentStatus.COMPLETED,
                ~holds_bed,
            )
            .order_by(*order_by)
        )
        if application_ids is not None:
            stmt = stmt.where(Application.id.in_(list(application_ids)))
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            return [(row[0], row[1]) for row in self.db.execute(stmt).all()]
        except SQLAlchemyError as e:
            raise RepositoryError(f"Eligible application query failed: {str(e)}") from e

    def find_latest_approved_for_user(self, user_id: str) -> Optional[Application]:
        stmt = (
            select(Application)
            .where(
                Application.user_id == user_id,
                Application.application_status == ApplicationStatus.APPROVED,
            )
            .order_by(Application.submitted_at.desc(), Application.id.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def find_live_for_user(self, user_id: str) -> Optional[Application]:
        """The user's application that has not been rejected, if any."""
        stmt = (
            select(Application)
            .where(
                Application.user_id == user_id,
                Application.application_status != ApplicationStatus.REJECTED,
            )
            .order_by(Application.submitted_at.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_with_users(self, status: Optional[ApplicationStatus] = None) -> List[Application]:
        stmt = select(Application).options(joinedload(Application.user)).order_by(
            Application.submitted_at.desc()
        )
        if status is not None:
            stmt = stmt.where(Application.application_status == status)
        return list(self.db.execute(stmt).scalars().unique().all())
