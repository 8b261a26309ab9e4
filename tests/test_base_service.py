from sqlalchemy.exc import IntegrityError, OperationalError

from hostel_allocation.core.exceptions import ConflictError, ErrorCode, NotFoundError
from hostel_allocation.services.base import BaseService
from hostel_allocation.services.base.service_result import ErrorSeverity


def test_client_errors_keep_their_status(session):
    result = BaseService(session)._handle_exception(NotFoundError("Room", "r-1"), "get room", "r-1")

    assert not result.is_success
    assert result.status_code == 404
    assert result.error.code == ErrorCode.NOT_FOUND


def test_unexpected_errors_become_internal_failures(session):
    result = BaseService(session)._handle_exception(ValueError("boom"), "do thing", "x-1")

    assert result.status_code == 500
    assert result.error.code == ErrorCode.INTERNAL_ERROR
    assert result.error.severity == ErrorSeverity.CRITICAL
    assert result.error.message == "Failed to do thing"
    assert result.error.details == {"error": "boom", "entity_ref": "x-1"}


def test_database_errors_are_classified(session):
    service = BaseService(session)
    integrity = IntegrityError("INSERT INTO rooms ...", {}, Exception("UNIQUE constraint failed"))
    operational = OperationalError("SELECT 1", {}, Exception("database is locked"))

    assert service._handle_exception(integrity, "create room").status_code == 409
    assert service._handle_exception(integrity, "create room").error.code == ErrorCode.CONFLICT
    assert service._handle_exception(operational, "list rooms").status_code == 500
    assert service._handle_exception(operational, "list rooms").error.code == ErrorCode.DATABASE_ERROR


def test_transaction_rolls_back_and_reraises(session, factory):
    service = BaseService(session)
    hostel = factory.hostel("Alpha")

    try:
        with service.transaction():
            hostel.name = "Renamed"
            session.flush()
            raise ConflictError("stop", {})
    except ConflictError:
        pass

    session.expire_all()
    assert session.get(type(hostel), hostel.id).name == "Alpha"
