from datetime import datetime, timedelta, timezone
from decimal import Decimal
from itertools import count
from typing import Optional

import pytest

from hostel_allocation.db import Database
from hostel_allocation.models import (
    Allocation,
    Application,
    Hostel,
    Payment,
    Room,
    Setting,
    User,
)
from hostel_allocation.models.base import (
    AcademicLevel,
    AllocationStatus,
    ApplicationStatus,
    Gender,
    HostelGender,
    PaymentStatus,
)
from hostel_allocation.services.payment import PaystackGateway

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

WEBHOOK_SECRET = "sk_test_0123456789abcdefghijklmnop"


class Factory:
    """Creates committed rows with sensible defaults."""

    def __init__(self, session):
        self.session = session
        self._seq = count(1)

    def _save(self, entity):
        self.session.add(entity)
        self.session.commit()
        return entity

    def user(
        self,
        gender: Optional[Gender] = Gender.MALE,
        admission_year: Optional[int] = 2022,
        matric_no: Optional[str] = None,
        name: Optional[str] = None,
    ) -> User:
        n = next(self._seq)
        return self._save(
            User(
                name=name or f"Student {n}",
                email=f"student{n}@example.edu",
                matric_no=matric_no,
                gender=gender,
                admission_year=admission_year,
            )
        )

    def hostel(self, name: str, gender: HostelGender = HostelGender.MALE, is_active: bool = True) -> Hostel:
        return self._save(Hostel(name=name, gender=gender, is_active=is_active))

    def room(self, hostel: Hostel, number: str = "101", capacity: int = 2) -> Room:
        return self._save(Room(hostel_id=hostel.id, number=number, capacity=capacity))

    def application(
        self,
        user: User,
        status: ApplicationStatus = ApplicationStatus.APPROVED,
        payment_status: PaymentStatus = PaymentStatus.COMPLETED,
        level: AcademicLevel = AcademicLevel.YEAR_2,
        submitted_at: Optional[datetime] = None,
        gender: Optional[Gender] = None,
    ) -> Application:
        return self._save(
            Application(
                user_id=user.id,
                hostel_preferences=[],
                gender=gender or user.gender or Gender.MALE,
                level=level,
                application_status=status,
                payment_status=payment_status,
                submitted_at=submitted_at or NOW,
            )
        )

    def allocation(
        self,
        user: User,
        application: Application,
        room: Room,
        status: AllocationStatus = AllocationStatus.ALLOCATED,
    ) -> Allocation:
        return self._save(
            Allocation(
                user_id=user.id,
                application_id=application.id,
                room_id=room.id,
                status=status,
                allocated_at=NOW,
                confirmed_at=NOW if status == AllocationStatus.CONFIRMED else None,
            )
        )

    def payment(
        self,
        application: Application,
        status: PaymentStatus = PaymentStatus.PENDING,
        amount: Decimal = Decimal("50000.00"),
        reference: Optional[str] = None,
    ) -> Payment:
        n = next(self._seq)
        return self._save(
            Payment(
                application_id=application.id,
                user_id=application.user_id,
                reference=reference or f"HAS-TEST-{n}",
                amount=amount,
                currency="NGN",
                status=status,
                paid_at=NOW if status == PaymentStatus.COMPLETED else None,
            )
        )

    def setting(self, key: str, value: Optional[str]) -> Setting:
        return self._save(Setting(key=key, value=value))

    def open_window(self, start_key: str, deadline_key: str, now: datetime = NOW) -> None:
        self.setting(start_key, (now - timedelta(days=1)).isoformat())
        self.setting(deadline_key, (now + timedelta(days=1)).isoformat())


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.drop_all()
    db.dispose()


@pytest.fixture
def session(database):
    with database.session() as db:
        yield db


@pytest.fixture
def factory(session):
    return Factory(session)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def demo_gateway():
    gateway = PaystackGateway(secret_key="", frontend_url="http://portal.test")
    yield gateway
    gateway.close()
