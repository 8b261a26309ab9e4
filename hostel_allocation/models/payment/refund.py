"""Refund record created alongside a payment refund."""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Enum, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_allocation.models.base import RefundStatus, TimestampModel, UTCDateTime, utcnow

if TYPE_CHECKING:
    from hostel_allocation.models.payment.payment import Payment


class Refund(TimestampModel):
    __tablename__ = "refunds"

    payment_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("payments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2), nullable=False)
    reason: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[RefundStatus] = mapped_column(
        Enum(RefundStatus, name="refund_status_enum", native_enum=False, length=10),
        nullable=False,
        default=RefundStatus.PENDING,
    )
    requested_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    requested_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, default=utcnow)

    payment: Mapped["Payment"] = relationship("Payment", back_populates="refunds")
