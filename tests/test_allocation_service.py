from datetime import timedelta

from hostel_allocation.core.exceptions import ErrorCode
from hostel_allocation.models import Allocation, Application
from hostel_allocation.models.base import (
    AllocationStatus,
    ApplicationStatus,
    Gender,
    HostelGender,
    PaymentStatus,
)
from hostel_allocation.schemas.allocation import AllocationCreate, AllocationRunRequest, AllocationUpdate
from hostel_allocation.services.allocation import AllocationService

from tests.conftest import NOW


def _create(session, **data):
    return AllocationService(session).create_allocation(AllocationCreate(**data), now=NOW)


# -------------------------------------------------------------------------
# create
# -------------------------------------------------------------------------

def test_create_uses_latest_approved_application(session, factory):
    room = factory.room(factory.hostel("Alpha"))
    user = factory.user()
    factory.application(user, submitted_at=NOW - timedelta(days=30))
    latest = factory.application(user, submitted_at=NOW)

    result = _create(session, user_id=user.id, room_id=room.id)

    assert result.is_success
    assert result.data.application_id == latest.id
    assert result.data.status == AllocationStatus.ALLOCATED


def test_create_requires_approved_application(session, factory):
    room = factory.room(factory.hostel("Alpha"))
    user = factory.user()
    pending = factory.application(user, status=ApplicationStatus.PENDING)

    implicit = _create(session, user_id=user.id, room_id=room.id)
    explicit = _create(session, user_id=user.id, room_id=room.id, application_id=pending.id)

    assert implicit.status_code == 404
    assert explicit.status_code == 422


def test_create_rejects_gender_mismatch(session, factory):
    room = factory.room(factory.hostel("Queens", HostelGender.FEMALE))
    user = factory.user(Gender.MALE)
    factory.application(user)

    result = _create(session, user_id=user.id, room_id=room.id)

    assert result.error.code == ErrorCode.GENDER_MISMATCH
    assert result.status_code == 409


def test_create_rejects_second_active_allocation(session, factory):
    hostel = factory.hostel("Alpha")
    first_room, second_room = factory.room(hostel, "1"), factory.room(hostel, "2")
    user = factory.user()
    application = factory.application(user)
    factory.allocation(user, application, first_room)

    result = _create(session, user_id=user.id, room_id=second_room.id)

    assert result.error.code == ErrorCode.DUPLICATE_ALLOCATION


def test_create_rejects_full_room(session, factory):
    room = factory.room(factory.hostel("Alpha"), capacity=1)
    occupant = factory.user()
    factory.allocation(occupant, factory.application(occupant), room)
    user = factory.user()
    factory.application(user)

    result = _create(session, user_id=user.id, room_id=room.id)

    assert result.error.code == ErrorCode.CAPACITY_EXCEEDED
    assert session.query(Allocation).count() == 1


def test_create_rejects_inactive_hostel(session, factory):
    room = factory.room(factory.hostel("Closed", is_active=False))
    user = factory.user()
    factory.application(user)

    result = _create(session, user_id=user.id, room_id=room.id)

    assert result.error.code == ErrorCode.VALIDATION_ERROR


def test_create_unknown_room(session, factory):
    user = factory.user()
    factory.application(user)

    assert _create(session, user_id=user.id, room_id="missing").status_code == 404


# -------------------------------------------------------------------------
# update
# -------------------------------------------------------------------------

def test_move_to_room_with_space(session, factory):
    hostel = factory.hostel("Alpha")
    source, target = factory.room(hostel, "1", capacity=1), factory.room(hostel, "2", capacity=1)
    user = factory.user()
    allocation = factory.allocation(user, factory.application(user), source)

    result = AllocationService(session).update_allocation(allocation.id, AllocationUpdate(room_id=target.id))

    assert result.is_success
    assert result.data.room_id == target.id


def test_move_to_full_room_fails_and_keeps_room(session, factory):
    hostel = factory.hostel("Alpha")
    source, target = factory.room(hostel, "1"), factory.room(hostel, "2", capacity=1)
    occupant = factory.user()
    factory.allocation(occupant, factory.application(occupant), target)
    user = factory.user()
    allocation = factory.allocation(user, factory.application(user), source)

    result = AllocationService(session).update_allocation(allocation.id, AllocationUpdate(room_id=target.id))

    assert result.error.code == ErrorCode.CAPACITY_EXCEEDED
    session.expire_all()
    assert session.get(Allocation, allocation.id).room_id == source.id


def test_move_rechecks_gender(session, factory):
    source = factory.room(factory.hostel("Kings", HostelGender.MALE))
    target = factory.room(factory.hostel("Queens", HostelGender.FEMALE))
    user = factory.user(Gender.MALE)
    allocation = factory.allocation(user, factory.application(user), source)

    result = AllocationService(session).update_allocation(allocation.id, AllocationUpdate(room_id=target.id))

    assert result.error.code == ErrorCode.GENDER_MISMATCH


def test_confirm_requires_completed_payment(session, factory):
    room = factory.room(factory.hostel("Alpha"))
    user = factory.user()
    application = factory.application(user)
    allocation = factory.allocation(user, application, room)
    service = AllocationService(session)

    refused = service.update_allocation(
        allocation.id, AllocationUpdate(status=AllocationStatus.CONFIRMED), now=NOW
    )
    assert refused.error.code == ErrorCode.INVALID_STATE

    factory.payment(application, status=PaymentStatus.COMPLETED)
    confirmed = service.update_allocation(
        allocation.id, AllocationUpdate(status=AllocationStatus.CONFIRMED), now=NOW
    )
    assert confirmed.is_success
    assert confirmed.data.status == AllocationStatus.CONFIRMED
    assert confirmed.data.confirmed_at is not None


def test_reactivation_is_capacity_conditional(session, factory):
    room = factory.room(factory.hostel("Alpha"), capacity=1)
    user = factory.user()
    parked = factory.allocation(user, factory.application(user), room, status=AllocationStatus.PENDING)
    newcomer = factory.user()
    factory.allocation(newcomer, factory.application(newcomer), room)

    result = AllocationService(session).update_allocation(
        parked.id, AllocationUpdate(status=AllocationStatus.ALLOCATED), now=NOW
    )

    assert result.error.code == ErrorCode.CAPACITY_EXCEEDED


def test_reactivation_when_room_has_space(session, factory):
    room = factory.room(factory.hostel("Alpha"), capacity=1)
    user = factory.user()
    parked = factory.allocation(user, factory.application(user), room, status=AllocationStatus.PENDING)

    result = AllocationService(session).update_allocation(
        parked.id, AllocationUpdate(status=AllocationStatus.ALLOCATED), now=NOW
    )

    assert result.is_success
    assert result.data.status == AllocationStatus.ALLOCATED


def test_rejected_allocation_cannot_come_back(session, factory):
    room = factory.room(factory.hostel("Alpha"))
    user = factory.user()
    allocation = factory.allocation(user, factory.application(user), room, status=AllocationStatus.REJECTED)

    result = AllocationService(session).update_allocation(
        allocation.id, AllocationUpdate(status=AllocationStatus.ALLOCATED)
    )

    assert result.error.code == ErrorCode.INVALID_STATE


# -------------------------------------------------------------------------
# delete / list
# -------------------------------------------------------------------------

def test_delete_frees_bed_and_keeps_application_approved(session, factory):
    room = factory.room(factory.hostel("Alpha"), capacity=1)
    user = factory.user()
    application = factory.application(user)
    allocation = factory.allocation(user, application, room, status=AllocationStatus.CONFIRMED)
    service = AllocationService(session)

    result = service.delete_allocation(allocation.id)

    assert result.is_success
    assert session.get(Allocation, allocation.id) is None
    assert session.get(Application, application.id).application_status == ApplicationStatus.APPROVED

    rerun = service.run_allocation(AllocationRunRequest(application_ids=[application.id]), now=NOW).unwrap()
    assert rerun.allocated_count == 1


def test_delete_refuses_inactive_allocation(session, factory):
    room = factory.room(factory.hostel("Alpha"))
    user = factory.user()
    allocation = factory.allocation(user, factory.application(user), room, status=AllocationStatus.PENDING)

    result = AllocationService(session).delete_allocation(allocation.id)

    assert result.error.code == ErrorCode.INVALID_STATE


def test_list_allocations_includes_details(session, factory):
    room = factory.room(factory.hostel("Alpha"), "12")
    user = factory.user(name="Ada Obi", matric_no="U2022/0042")
    factory.allocation(user, factory.application(user), room)

    (row,) = AllocationService(session).list_allocations().unwrap()

    assert row.user_name == "Ada Obi"
    assert row.matric_no == "U2022/0042"
    assert row.room_number == "12"
    assert row.hostel_name == "Alpha"


def test_run_request_overrides_persisted_settings(session, factory):
    factory.setting("max_allocations_per_run", "1")
    factory.setting("prioritize_by_level", "false")

    settings = AllocationService(session).resolve_run_settings(
        AllocationRunRequest(max_allocations_per_run=7)
    )

    assert settings.max_allocations_per_run == 7
    assert settings.prioritize_by_level is False
    assert settings.prioritize_by_submission_date is True
