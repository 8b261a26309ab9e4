"""Hostel repository."""

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from hostel_allocation.models.hostel import Hostel
from hostel_allocation.repositories.base import BaseRepository


class HostelRepository(BaseRepository[Hostel]):

    def __init__(self, session: Session):
        super().__init__(Hostel, session)

    def find_active(self) -> List[Hostel]:
        stmt = select(Hostel).where(Hostel.is_active.is_(True)).order_by(Hostel.name)
        return list(self.db.execute(stmt).scalars().all())
