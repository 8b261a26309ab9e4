"""
User model.

Identity of a student (or administrator). Gender and admission year
feed the allocation rules; academic level is derived, never stored.
"""

from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_allocation.models.base import Gender, TimestampModel, UserRole, UserStatus

if TYPE_CHECKING:
    from hostel_allocation.models.allocation.allocation import Allocation
    from hostel_allocation.models.application.application import Application


class User(TimestampModel):
    """Student or admin account."""

    __tablename__ = "users"

    matric_no: Mapped[Optional[str]] = mapped_column(
        String(30),
        unique=True,
        nullable=True,
        index=True,
        comment="Matriculation number, e.g. U2021/5570004",
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)

    gender: Mapped[Optional[Gender]] = mapped_column(
        Enum(Gender, name="gender_enum", native_enum=False, length=10),
        nullable=True,
    )
    admission_year: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role_enum", native_enum=False, length=10),
        nullable=False,
        default=UserRole.STUDENT,
    )
    status: Mapped[UserStatus] = mapped_column(
        Enum(UserStatus, name="user_status_enum", native_enum=False, length=12),
        nullable=False,
        default=UserStatus.ACTIVE,
    )

    applications: Mapped[List["Application"]] = relationship(
        "Application",
        back_populates="user",
        foreign_keys="Application.user_id",
    )
    allocations: Mapped[List["Allocation"]] = relationship(
        "Allocation",
        back_populates="user",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, matric_no={self.matric_no})>"
