"""
Application model.

A student's request for accommodation. Review state and payment state
are tracked separately; an application is never deleted, only
superseded by a later one after rejection.
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_allocation.models.base import (
    AcademicLevel,
    ApplicationStatus,
    Gender,
    PaymentStatus,
    TimestampModel,
    UTCDateTime,
    utcnow,
)

if TYPE_CHECKING:
    from hostel_allocation.models.allocation.allocation import Allocation
    from hostel_allocation.models.payment.payment import Payment
    from hostel_allocation.models.user.user import User


class Application(TimestampModel):
    """Hostel application submitted by one user."""

    __tablename__ = "applications"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    hostel_preferences: Mapped[List[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
        comment="Ordered hostel ids, most preferred first",
    )
    gender: Mapped[Gender] = mapped_column(
        Enum(Gender, name="gender_enum", native_enum=False, length=10),
        nullable=False,
    )
    level: Mapped[AcademicLevel] = mapped_column(
        Enum(AcademicLevel, name="academic_level_enum", native_enum=False, length=10),
        nullable=False,
        index=True,
    )

    application_status: Mapped[ApplicationStatus] = mapped_column(
        Enum(ApplicationStatus, name="application_status_enum", native_enum=False, length=10),
        nullable=False,
        default=ApplicationStatus.PENDING,
        index=True,
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, name="payment_status_enum", native_enum=False, length=10),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True,
    )

    roommate_user_id: Mapped[Optional[str]] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
        index=True,
    )

    user: Mapped["User"] = relationship(
        "User",
        back_populates="applications",
        foreign_keys=[user_id],
    )
    roommate: Mapped[Optional["User"]] = relationship("User", foreign_keys=[roommate_user_id])
    allocations: Mapped[List["Allocation"]] = relationship(
        "Allocation",
        back_populates="application",
    )
    payments: Mapped[List["Payment"]] = relationship(
        "Payment",
        back_populates="application",
        order_by="Payment.created_at",
    )

    def __repr__(self) -> str:
        return (
            f"<Application(id={self.id}, status={self.application_status}, "
            f"payment={self.payment_status})>"
        )
