"""
Setting repository.

Reads the raw key/value rows consumed by the window gate and the
allocation run. Values are returned untouched; interpretation happens
in the services.
"""

from typing import Dict, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hostel_allocation.core.exceptions import RepositoryError
from hostel_allocation.models.system import Setting
from hostel_allocation.repositories.base import BaseRepository


class SettingRepository(BaseRepository[Setting]):

    def __init__(self, session: Session):
        super().__init__(Setting, session)

    def get_value(self, key: str) -> Optional[str]:
        return self.get_many([key]).get(key)

    def get_many(self, keys: Iterable[str]) -> Dict[str, Optional[str]]:
        """Raw values for ``keys``; missing keys are absent from the result."""
        keys = list(keys)
        try:
            rows = self.db.execute(
                select(Setting.key, Setting.value).where(Setting.key.in_(keys))
            ).all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Settings lookup failed: {str(e)}") from e
        return {row.key: row.value for row in rows}

    def set_value(self, key: str, value: Optional[str], description: Optional[str] = None) -> Setting:
        setting = self.find_one_by_criteria({"key": key})
        if setting is None:
            return self.create(Setting(key=key, value=value, description=description))
        data = {"value": value}
        if description is not None:
            data["description"] = description
        return self.update(setting, data)
