from datetime import timedelta

from sqlalchemy import func, select

from hostel_allocation.models import Allocation, Room
from hostel_allocation.models.base import (
    ACTIVE_ALLOCATION_STATUSES,
    AllocationStatus,
    Gender,
    HostelGender,
    is_gender_compatible,
)
from hostel_allocation.repositories import ApplicationRepository, RoomRepository
from hostel_allocation.repositories.hostel import RoomOccupancyRow
from hostel_allocation.schemas.allocation import AllocationRunSettings
from hostel_allocation.services.allocation import (
    AllocationMatcher,
    AllocationService,
    EligibilityFilter,
    RoomCapacityIndex,
)

from tests.conftest import NOW


def _occupancy(session, room_id):
    return session.execute(
        select(func.count(Allocation.id)).where(
            Allocation.room_id == room_id,
            Allocation.status.in_(ACTIVE_ALLOCATION_STATUSES),
        )
    ).scalar_one()


def _assert_invariants(session):
    for room in session.execute(select(Room)).scalars().all():
        assert _occupancy(session, room.id) <= room.capacity
        for allocation in room.allocations:
            if allocation.is_active:
                assert is_gender_compatible(room.hostel.gender, allocation.user.gender)
    active_per_user = session.execute(
        select(Allocation.user_id, func.count(Allocation.id))
        .where(Allocation.status.in_(ACTIVE_ALLOCATION_STATUSES))
        .group_by(Allocation.user_id)
    ).all()
    assert all(n == 1 for _, n in active_per_user)


def test_fifo_matching_fills_rooms_by_gender(session, factory):
    male_a = factory.room(factory.hostel("Male A", HostelGender.MALE), "1", capacity=2)
    male_b = factory.room(factory.hostel("Male B", HostelGender.MALE), "1", capacity=2)
    female = factory.room(factory.hostel("Female", HostelGender.FEMALE), "1", capacity=2)

    males = [
        factory.application(factory.user(Gender.MALE), submitted_at=NOW + timedelta(minutes=i))
        for i in range(5)
    ]
    girl = factory.application(factory.user(Gender.FEMALE), submitted_at=NOW + timedelta(minutes=10))

    result = AllocationService(session).run_allocation(now=NOW).unwrap()

    assert result.allocated_count == 5
    assert result.total_considered == 6
    assert result.unmatched_count == 1
    by_application = {a.application_id: a.room_id for a in result.allocations}
    assert [by_application.get(app.id) for app in males] == [male_a.id, male_a.id, male_b.id, male_b.id, None]
    assert by_application[girl.id] == female.id
    _assert_invariants(session)


def test_mixed_hostel_accepts_any_gender(session, factory):
    mixed = factory.room(factory.hostel("Commons", HostelGender.MIXED), capacity=2)
    factory.application(factory.user(Gender.MALE))
    factory.application(factory.user(Gender.FEMALE))

    result = AllocationService(session).run_allocation(now=NOW).unwrap()

    assert result.allocated_count == 2
    assert {a.room_id for a in result.allocations} == {mixed.id}
    _assert_invariants(session)


def test_candidate_without_gender_is_skipped(session, factory):
    factory.room(factory.hostel("Commons", HostelGender.MIXED))
    factory.application(factory.user(gender=None))
    ok = factory.application(factory.user(Gender.FEMALE), submitted_at=NOW + timedelta(minutes=1))

    result = AllocationService(session).run_allocation(now=NOW).unwrap()

    assert result.skipped_count == 1
    assert result.allocated_count == 1
    assert result.allocations[0].application_id == ok.id


def test_second_run_allocates_nothing(session, factory):
    factory.room(factory.hostel("Alpha"), capacity=4)
    for _ in range(3):
        factory.application(factory.user())
    service = AllocationService(session)

    first = service.run_allocation(now=NOW).unwrap()
    second = service.run_allocation(now=NOW).unwrap()

    assert first.allocated_count == 3
    assert second.allocated_count == 0
    assert second.total_considered == 0
    assert second.message == "No eligible applications to allocate"


def test_zero_rooms_is_a_successful_run(session, factory):
    factory.application(factory.user())

    result = AllocationService(session).run_allocation(now=NOW)

    assert result.is_success
    assert result.data.allocated_count == 0
    assert result.data.unmatched_count == 1


def test_cap_bounds_the_run(session, factory):
    factory.room(factory.hostel("Alpha"), capacity=10)
    for i in range(4):
        factory.application(factory.user(), submitted_at=NOW + timedelta(minutes=i))
    factory.setting("max_allocations_per_run", "3")

    result = AllocationService(session).run_allocation(now=NOW).unwrap()

    assert result.total_considered == 3
    assert result.allocated_count == 3


def test_stale_snapshot_counts_failure_and_refreshes(session, factory):
    hostel = factory.hostel("Alpha")
    room = factory.room(hostel, capacity=1)
    occupant = factory.user()
    factory.allocation(occupant, factory.application(occupant), room)
    factory.application(factory.user())

    # Snapshot taken before the occupant was housed
    index = RoomCapacityIndex.from_rows(
        [
            RoomOccupancyRow(
                room_id=room.id,
                room_number=room.number,
                capacity=1,
                occupancy=0,
                hostel_id=hostel.id,
                hostel_name=hostel.name,
                hostel_gender="MALE",
                hostel_is_active=True,
            )
        ]
    )
    candidates = EligibilityFilter(ApplicationRepository(session)).select(AllocationRunSettings())
    session.rollback()

    result = AllocationMatcher(session).run(candidates, index, now=NOW)

    assert result.failed_count == 1
    assert result.allocated_count == 0
    assert index.get(room.id).occupancy == 1
    assert _occupancy(session, room.id) == 1


def test_concurrent_allocation_of_same_student_is_a_failure(session, factory):
    factory.room(factory.hostel("Alpha"), capacity=2)
    other_room = factory.room(factory.hostel("Beta"), capacity=1)
    user = factory.user()
    application = factory.application(user)

    candidates = EligibilityFilter(ApplicationRepository(session)).select(AllocationRunSettings())
    index = RoomCapacityIndex.build(RoomRepository(session))
    session.rollback()
    # A manual allocation lands between selection and matching
    factory.allocation(user, application, other_room)

    result = AllocationMatcher(session).run(candidates, index, now=NOW)

    assert result.failed_count == 1
    assert result.allocated_count == 0
    _assert_invariants(session)


def test_allocations_are_persisted_as_allocated(session, factory):
    factory.room(factory.hostel("Alpha"))
    application = factory.application(factory.user())

    AllocationService(session).run_allocation(now=NOW)

    allocation = session.execute(
        select(Allocation).where(Allocation.application_id == application.id)
    ).scalar_one()
    assert allocation.status == AllocationStatus.ALLOCATED
