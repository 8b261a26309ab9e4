"""Payment and refund repositories."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from hostel_allocation.models.base import PaymentStatus
from hostel_allocation.models.payment import Payment, Refund
from hostel_allocation.repositories.base import BaseRepository


class PaymentRepository(BaseRepository[Payment]):

    def __init__(self, session: Session):
        super().__init__(Payment, session)

    def find_by_reference(self, reference: str, for_update: bool = False) -> Optional[Payment]:
        stmt = select(Payment).where(Payment.reference == reference)
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def find_for_application(self, application_id: str) -> List[Payment]:
        return self.find_by_criteria(
            {"application_id": application_id},
            order_by=["-created_at"],
        )

    def has_completed_payment(self, application_id: str) -> bool:
        stmt = (
            select(Payment.id)
            .where(
                Payment.application_id == application_id,
                Payment.status == PaymentStatus.COMPLETED,
            )
            .limit(1)
        )
        return self.db.execute(stmt).first() is not None

    def list_with_details(self, status: Optional[PaymentStatus] = None) -> List[Payment]:
        stmt = (
            select(Payment)
            .options(joinedload(Payment.user), joinedload(Payment.application))
            .order_by(Payment.created_at.desc())
        )
        if status is not None:
            stmt = stmt.where(Payment.status == status)
        return list(self.db.execute(stmt).scalars().unique().all())


class RefundRepository(BaseRepository[Refund]):

    def __init__(self, session: Session):
        super().__init__(Refund, session)
