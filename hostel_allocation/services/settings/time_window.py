"""
Admission time windows.

Decides whether the application or payment period is ``not_started``,
``open`` or ``closed`` from the persisted start/deadline settings and the
optional registration override. Setting values arrive loosely typed (plain
ISO strings, JSON-encoded strings, ``YYYY-MM-DDTHH:MM`` values from
datetime-local inputs, dicts written by older admin screens), so every
read goes through :func:`normalize_date_setting` first.
"""

import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from dateutil.parser import isoparse
from sqlalchemy.orm import Session

from hostel_allocation.config import setting_keys
from hostel_allocation.core.exceptions import DateParseError, RepositoryError, WindowClosedError
from hostel_allocation.core.logging import get_logger
from hostel_allocation.repositories.system import SettingRepository
from hostel_allocation.schemas.settings import WindowStatus, WindowStatusResponse
from hostel_allocation.services.base import BaseService

logger = get_logger(__name__)

_TRUNCATED_LOCAL = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}$")
_DATE_DICT_KEYS = ("startDate", "deadline", "value")


# ==================== Normalisation ====================

def _unwrap_json(value: str) -> Any:
    """Decode one level of JSON encoding; non-JSON text is returned as is."""
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        return value


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_date_setting(raw: Any) -> Optional[datetime]:
    """
    Strictly interpret a date setting as an aware UTC datetime.

    Returns None when the value is absent or blank.

    Raises:
        DateParseError: the value is present but not a date
    """
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise DateParseError(raw)

    if isinstance(raw, datetime):
        return _as_utc(raw)

    if isinstance(raw, dict):
        for key in _DATE_DICT_KEYS:
            if raw.get(key):
                return parse_date_setting(raw[key])
        return None

    if not isinstance(raw, str):
        raise DateParseError(raw)

    decoded = _unwrap_json(raw)
    if isinstance(decoded, dict):
        return parse_date_setting(decoded)
    text = decoded if isinstance(decoded, str) else raw
    text = text.strip()
    if not text:
        return None

    if _TRUNCATED_LOCAL.match(text):
        text = f"{text}:00Z"

    try:
        return _as_utc(isoparse(text))
    except (ValueError, OverflowError) as e:
        raise DateParseError(raw) from e


def normalize_date_setting(raw: Any) -> Optional[datetime]:
    """Lenient variant of :func:`parse_date_setting`: unparsable values are absent."""
    try:
        return parse_date_setting(raw)
    except DateParseError:
        logger.warning("Ignoring unparsable date setting", extra={"raw_value": repr(raw)})
        return None


def normalize_flag_setting(raw: Any) -> Optional[bool]:
    """
    Interpret an on/off setting.

    Accepts booleans, "true"/"false" in any case (optionally JSON-encoded)
    and ``{"enabled": bool}``. Anything else is treated as absent.
    """
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, dict):
        enabled = raw.get("enabled")
        return enabled if isinstance(enabled, bool) else None
    if isinstance(raw, str):
        decoded = _unwrap_json(raw.strip())
        if isinstance(decoded, (bool, dict)):
            return normalize_flag_setting(decoded)
        if isinstance(decoded, str):
            lowered = decoded.strip().lower()
            if lowered == "true":
                return True
            if lowered == "false":
                return False
    return None


# ==================== Decision ====================

def compute_window_status(
    now: datetime,
    start: Optional[datetime],
    deadline: Optional[datetime],
    open_override: Optional[bool] = None,
) -> WindowStatus:
    """
    Status of an admission window at ``now``; the first matching rule wins.

    1. override explicitly False -> not_started
    2. no start                  -> not_started
    3. now before start          -> not_started
    4. now after deadline        -> closed
    5. otherwise                 -> open
    """
    now = _as_utc(now)
    if open_override is False:
        return WindowStatus.NOT_STARTED
    if start is None:
        return WindowStatus.NOT_STARTED
    if now < _as_utc(start):
        return WindowStatus.NOT_STARTED
    if deadline is not None and now > _as_utc(deadline):
        return WindowStatus.CLOSED
    return WindowStatus.OPEN


def format_window_date(value: datetime) -> str:
    value = _as_utc(value)
    return f"{value:%B} {value.day}, {value.year} at {value:%I:%M %p} UTC"


@dataclass(frozen=True)
class WindowDefinition:
    """Setting keys and wording of one admission window."""

    name: str
    start_key: str
    deadline_key: str
    override_key: Optional[str]
    subject: str
    plural: bool

    def message(self, status: WindowStatus, start: Optional[datetime], deadline: Optional[datetime]) -> str:
        be = "are" if self.plural else "is"
        if status is WindowStatus.NOT_STARTED:
            if start is not None:
                return f"{self.subject} will open on {format_window_date(start)}."
            return f"{self.subject} {'have' if self.plural else 'has'} not started yet. Please check back later."
        if status is WindowStatus.CLOSED:
            if deadline is not None:
                return f"{self.subject} closed on {format_window_date(deadline)}."
            return f"{self.subject} {be} currently closed."
        if deadline is not None:
            return f"{self.subject} {'close' if self.plural else 'closes'} on {format_window_date(deadline)}."
        return f"{self.subject} {be} currently open."


APPLICATION_WINDOW = WindowDefinition(
    name="application",
    start_key=setting_keys.APPLICATION_START_DATE,
    deadline_key=setting_keys.APPLICATION_DEADLINE,
    override_key=setting_keys.REGISTRATION_OPEN,
    subject="Applications",
    plural=True,
)

PAYMENT_WINDOW = WindowDefinition(
    name="payment",
    start_key=setting_keys.PAYMENT_START_DATE,
    deadline_key=setting_keys.PAYMENT_DEADLINE,
    override_key=None,
    subject="Payment period",
    plural=False,
)


class TimeWindowService(BaseService):
    """Reads window settings and reports their status."""

    def __init__(self, db_session: Session, settings_repository: Optional[SettingRepository] = None):
        super().__init__(db_session)
        self.settings = settings_repository or SettingRepository(db_session)

    def application_window(self, now: Optional[datetime] = None) -> WindowStatusResponse:
        return self.window_status(APPLICATION_WINDOW, now)

    def payment_window(self, now: Optional[datetime] = None) -> WindowStatusResponse:
        return self.window_status(PAYMENT_WINDOW, now)

    def window_status(self, window: WindowDefinition, now: Optional[datetime] = None) -> WindowStatusResponse:
        """
        Status of ``window`` at ``now`` (defaults to the current time).

        A failing settings store reports the window as closed rather than
        raising, so status pages keep working.
        """
        now = now or datetime.now(timezone.utc)
        keys = [window.start_key, window.deadline_key]
        if window.override_key:
            keys.append(window.override_key)

        try:
            raw: Dict[str, Optional[str]] = self.settings.get_many(keys)
        except RepositoryError as e:
            self._logger.error(
                f"Unable to read {window.name} window settings: {e}",
                exc_info=True,
                extra={"window": window.name},
            )
            return WindowStatusResponse(
                status=WindowStatus.CLOSED,
                is_open=False,
                message=f"Unable to verify {window.name} status. Please contact administration.",
            )

        start = normalize_date_setting(raw.get(window.start_key))
        deadline = normalize_date_setting(raw.get(window.deadline_key))
        override = None
        if window.override_key:
            override = normalize_flag_setting(raw.get(window.override_key))

        status = compute_window_status(now, start, deadline, override)
        return WindowStatusResponse(
            status=status,
            is_open=status is WindowStatus.OPEN,
            start_date=start,
            deadline=deadline,
            message=window.message(status, start, deadline),
        )

    def require_open(self, window: WindowDefinition, now: Optional[datetime] = None) -> WindowStatusResponse:
        """
        Raises:
            WindowClosedError: the window is not open at ``now``
        """
        state = self.window_status(window, now)
        if not state.is_open:
            raise WindowClosedError(window.name, state.status.value)
        return state
