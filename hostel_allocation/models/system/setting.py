"""
Setting model.

Flat key/value store for admission dates, flags and numeric limits.
Values are kept as the raw text the admin screens wrote; callers
normalise them (they may be JSON-encoded or truncated date strings).
"""

from typing import Optional

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hostel_allocation.models.base import TimestampModel


class Setting(TimestampModel):
    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Setting(key={self.key})>"
