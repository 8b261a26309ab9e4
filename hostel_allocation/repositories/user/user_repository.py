"""User repository."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from hostel_allocation.models.user import User
from hostel_allocation.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Lookups for student and admin accounts."""

    def __init__(self, session: Session):
        super().__init__(User, session)

    def find_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email.strip().lower())
        return self.db.execute(stmt).scalar_one_or_none()

    def find_by_matric_no(self, matric_no: str) -> Optional[User]:
        stmt = select(User).where(User.matric_no == matric_no.strip().upper())
        return self.db.execute(stmt).scalar_one_or_none()
