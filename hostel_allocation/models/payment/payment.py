"""
Payment model.

Hostel fee payment for one application. The gateway decides success or
failure; admins may confirm, reject or refund.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_allocation.models.base import PaymentStatus, TimestampModel, UTCDateTime

if TYPE_CHECKING:
    from hostel_allocation.models.application.application import Application
    from hostel_allocation.models.payment.refund import Refund
    from hostel_allocation.models.user.user import User


class Payment(TimestampModel):
    """
    Payment model for tracking hostel fee transactions.
    """

    __tablename__ = "payments"

    # ==================== Foreign Keys ====================
    application_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("applications.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    # ==================== Core Payment Details ====================
    reference: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
        index=True,
        comment="Unique payment reference sent to the gateway",
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=10, scale=2),
        nullable=False,
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="NGN")

    # ==================== Payment Status ====================
    status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, name="payment_status_enum", native_enum=False, length=10),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )

    # ==================== Transaction Details ====================
    transaction_id: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        comment="External transaction ID from gateway",
    )
    gateway_response: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    paid_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    failure_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # ==================== Refund Metadata ====================
    refunded_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)
    refunded_by: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    refund_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # ==================== Relationships ====================
    application: Mapped["Application"] = relationship("Application", back_populates="payments")
    user: Mapped["User"] = relationship("User")
    refunds: Mapped[List["Refund"]] = relationship(
        "Refund",
        back_populates="payment",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Payment(id={self.id}, reference={self.reference}, status={self.status})>"
