import pytest
from pydantic import ValidationError as SchemaValidationError

from hostel_allocation.config import setting_keys
from hostel_allocation.core.exceptions import ErrorCode
from hostel_allocation.models.base import AcademicLevel, ApplicationStatus, Gender, PaymentStatus
from hostel_allocation.schemas.application import ApplicationStatusUpdate, ApplicationSubmit
from hostel_allocation.services.application import ApplicationService

from tests.conftest import NOW


@pytest.fixture
def open_applications(factory):
    factory.open_window(setting_keys.APPLICATION_START_DATE, setting_keys.APPLICATION_DEADLINE)


def _submit(session, user, hostel_ids, **extra):
    return ApplicationService(session).submit_application(
        user.id, ApplicationSubmit(hostel_preferences=hostel_ids, **extra), now=NOW
    )


def test_submit_derives_gender_and_level_from_user(session, factory, open_applications):
    hostel = factory.hostel("Alpha")
    user = factory.user(Gender.FEMALE, admission_year=2022)

    result = _submit(session, user, [hostel.id], notes="Ground floor please")

    assert result.is_success
    application = result.data
    assert application.gender == Gender.FEMALE
    assert application.level == AcademicLevel.YEAR_3
    assert application.application_status == ApplicationStatus.PENDING
    assert application.payment_status == PaymentStatus.PENDING
    assert application.hostel_preferences == [hostel.id]


def test_submit_outside_window_is_refused(session, factory):
    hostel = factory.hostel("Alpha")

    result = _submit(session, factory.user(), [hostel.id])

    assert result.error.code == ErrorCode.WINDOW_CLOSED
    assert result.status_code == 403


def test_one_live_application_per_user(session, factory, open_applications):
    hostel = factory.hostel("Alpha")
    user = factory.user()
    assert _submit(session, user, [hostel.id]).is_success

    second = _submit(session, user, [hostel.id])

    assert second.error.code == ErrorCode.CONFLICT


def test_resubmission_after_rejection(session, factory, open_applications):
    hostel = factory.hostel("Alpha")
    user = factory.user()
    factory.application(user, status=ApplicationStatus.REJECTED)

    assert _submit(session, user, [hostel.id]).is_success


def test_submit_requires_gender_on_profile(session, factory, open_applications):
    hostel = factory.hostel("Alpha")

    result = _submit(session, factory.user(gender=None), [hostel.id])

    assert result.error.code == ErrorCode.VALIDATION_ERROR


def test_submit_rejects_unknown_hostel(session, factory, open_applications):
    result = _submit(session, factory.user(), ["nope"])

    assert result.error.code == ErrorCode.VALIDATION_ERROR
    assert result.error.details == {"field_errors": {"hostel_preferences": ["nope"]}}


def test_roommate_must_be_someone_else(session, factory, open_applications):
    hostel = factory.hostel("Alpha")
    user = factory.user()

    myself = _submit(session, user, [hostel.id], roommate_user_id=user.id)
    ghost = _submit(session, user, [hostel.id], roommate_user_id="ghost")

    assert myself.error.code == ErrorCode.VALIDATION_ERROR
    assert ghost.error.code == ErrorCode.NOT_FOUND


def test_preferences_are_deduplicated():
    payload = ApplicationSubmit(hostel_preferences=["a", " a", "b", "a"])
    assert payload.hostel_preferences == ["a", "b"]
    with pytest.raises(SchemaValidationError):
        ApplicationSubmit(hostel_preferences=[])


def test_status_transitions(session, factory):
    service = ApplicationService(session)
    application = factory.application(factory.user(), status=ApplicationStatus.PENDING)

    approved = service.update_status(application.id, ApplicationStatusUpdate(status=ApplicationStatus.APPROVED))
    rejected = service.update_status(application.id, ApplicationStatusUpdate(status=ApplicationStatus.REJECTED))
    revived = service.update_status(application.id, ApplicationStatusUpdate(status=ApplicationStatus.APPROVED))

    assert approved.is_success
    assert rejected.data.application_status == ApplicationStatus.REJECTED
    assert revived.error.code == ErrorCode.INVALID_STATE


def test_list_filters_by_status(session, factory):
    pending = factory.application(factory.user(), status=ApplicationStatus.PENDING)
    factory.application(factory.user(), status=ApplicationStatus.APPROVED)

    rows = ApplicationService(session).list_applications(ApplicationStatus.PENDING).unwrap()

    assert [row.id for row in rows] == [pending.id]
