import json
from datetime import datetime, timedelta, timezone

import pytest

from hostel_allocation.config import setting_keys
from hostel_allocation.core.exceptions import DateParseError, RepositoryError, WindowClosedError
from hostel_allocation.schemas.settings import WindowStatus
from hostel_allocation.services.settings import (
    APPLICATION_WINDOW,
    PAYMENT_WINDOW,
    TimeWindowService,
    compute_window_status,
    normalize_date_setting,
    normalize_flag_setting,
    parse_date_setting,
)

from tests.conftest import NOW

UTC = timezone.utc


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2025-10-12T00:50", datetime(2025, 10, 12, 0, 50, tzinfo=UTC)),
        ('"2025-10-11T22:00:00.000Z"', datetime(2025, 10, 11, 22, 0, tzinfo=UTC)),
        ("  2025-10-11T22:00:00Z  ", datetime(2025, 10, 11, 22, 0, tzinfo=UTC)),
        ("2025-10-11T23:00:00+01:00", datetime(2025, 10, 11, 22, 0, tzinfo=UTC)),
        ("2025-10-11T22:00:00", datetime(2025, 10, 11, 22, 0, tzinfo=UTC)),
        ('{"startDate": "2025-01-05T08:00"}', datetime(2025, 1, 5, 8, 0, tzinfo=UTC)),
        ({"deadline": "2025-01-05T08:00:00Z"}, datetime(2025, 1, 5, 8, 0, tzinfo=UTC)),
        (datetime(2025, 1, 5, 8, 0), datetime(2025, 1, 5, 8, 0, tzinfo=UTC)),
    ],
)
def test_normalize_date_setting_accepts_loose_values(raw, expected):
    assert normalize_date_setting(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", '""', {}, "not a date", "2025-13-45T99:99", 42, True])
def test_normalize_date_setting_treats_garbage_as_absent(raw):
    assert normalize_date_setting(raw) is None


def test_parse_date_setting_is_strict():
    with pytest.raises(DateParseError):
        parse_date_setting("next tuesday")
    assert parse_date_setting(None) is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        (True, True),
        (False, False),
        ("true", True),
        ("FALSE", False),
        ('"true"', True),
        (json.dumps({"enabled": False}), False),
        ({"enabled": True}, True),
        ("yes", None),
        ("", None),
        (None, None),
        ({"enabled": "no"}, None),
    ],
)
def test_normalize_flag_setting(raw, expected):
    assert normalize_flag_setting(raw) is expected


def test_open_between_start_and_deadline_with_override():
    status = compute_window_status(NOW, NOW - timedelta(days=1), NOW + timedelta(days=1), True)
    assert status is WindowStatus.OPEN


@pytest.mark.parametrize("deadline", [None, NOW - timedelta(days=3), NOW + timedelta(days=3)])
def test_missing_start_is_not_started_regardless_of_deadline(deadline):
    assert compute_window_status(NOW, None, deadline) is WindowStatus.NOT_STARTED


def test_override_false_wins_over_dates():
    status = compute_window_status(NOW, NOW - timedelta(days=1), NOW + timedelta(days=1), False)
    assert status is WindowStatus.NOT_STARTED


def test_absent_override_behaves_as_open():
    start, deadline = NOW - timedelta(days=1), NOW + timedelta(days=1)
    assert compute_window_status(NOW, start, deadline, None) is compute_window_status(NOW, start, deadline, True)


def test_before_start_and_after_deadline():
    start, deadline = NOW, NOW + timedelta(days=2)
    assert compute_window_status(NOW - timedelta(seconds=1), start, deadline) is WindowStatus.NOT_STARTED
    assert compute_window_status(NOW, start, deadline) is WindowStatus.OPEN
    assert compute_window_status(deadline, start, deadline) is WindowStatus.OPEN
    assert compute_window_status(deadline + timedelta(seconds=1), start, deadline) is WindowStatus.CLOSED


def test_closed_is_never_followed_by_open():
    start, deadline = NOW - timedelta(days=5), NOW + timedelta(days=5)
    seen_closed = False
    for hours in range(-24 * 7, 24 * 7, 6):
        status = compute_window_status(NOW + timedelta(hours=hours), start, deadline)
        if seen_closed:
            assert status is WindowStatus.CLOSED
        seen_closed = seen_closed or status is WindowStatus.CLOSED
    assert seen_closed


def test_application_window_reads_settings(session, factory):
    factory.setting(setting_keys.APPLICATION_START_DATE, '"2025-02-20T08:00"')
    factory.setting(setting_keys.APPLICATION_DEADLINE, "2025-03-10T17:30")
    factory.setting(setting_keys.REGISTRATION_OPEN, "true")

    state = TimeWindowService(session).application_window(NOW)

    assert state.status is WindowStatus.OPEN
    assert state.is_open is True
    assert state.start_date == datetime(2025, 2, 20, 8, 0, tzinfo=UTC)
    assert state.message == "Applications close on March 10, 2025 at 05:30 PM UTC."


def test_application_window_registration_closed(session, factory):
    factory.open_window(setting_keys.APPLICATION_START_DATE, setting_keys.APPLICATION_DEADLINE)
    factory.setting(setting_keys.REGISTRATION_OPEN, '{"enabled": false}')

    state = TimeWindowService(session).application_window(NOW)

    assert state.status is WindowStatus.NOT_STARTED
    assert state.is_open is False


def test_payment_window_messages(session, factory):
    factory.setting(setting_keys.PAYMENT_START_DATE, "2025-01-01T00:00")
    factory.setting(setting_keys.PAYMENT_DEADLINE, "2025-02-01T09:00")
    service = TimeWindowService(session)

    closed = service.payment_window(NOW)
    assert closed.status is WindowStatus.CLOSED
    assert closed.message == "Payment period closed on February 1, 2025 at 09:00 AM UTC."

    early = service.payment_window(datetime(2024, 12, 1, tzinfo=UTC))
    assert early.status is WindowStatus.NOT_STARTED
    assert early.message.startswith("Payment period will open on January 1, 2025")


def test_no_settings_means_not_started(session):
    state = TimeWindowService(session).payment_window(NOW)
    assert state.status is WindowStatus.NOT_STARTED
    assert state.message == "Payment period has not started yet. Please check back later."


class _FailingSettings:
    def get_many(self, keys):
        raise RepositoryError("connection refused")


def test_store_failure_reports_closed(session):
    service = TimeWindowService(session, settings_repository=_FailingSettings())

    state = service.application_window(NOW)

    assert state.status is WindowStatus.CLOSED
    assert state.is_open is False
    assert state.message == "Unable to verify application status. Please contact administration."


def test_require_open_raises_when_closed(session):
    with pytest.raises(WindowClosedError) as exc_info:
        TimeWindowService(session).require_open(APPLICATION_WINDOW, NOW)
    assert exc_info.value.status_code == 403
    assert exc_info.value.details == {"window": "application", "status": "not_started"}


def test_require_open_returns_state_when_open(session, factory):
    factory.open_window(setting_keys.PAYMENT_START_DATE, setting_keys.PAYMENT_DEADLINE)
    state = TimeWindowService(session).require_open(PAYMENT_WINDOW, NOW)
    assert state.is_open
