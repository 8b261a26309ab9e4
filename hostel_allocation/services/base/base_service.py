"""
Base service: shared session, logger, transaction scope and the
exception-to-ServiceResult conversion every public operation ends with.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from hostel_allocation.core.exceptions import BaseAppException, ErrorCode
from hostel_allocation.core.logging import get_logger
from hostel_allocation.services.base.service_result import (
    ErrorSeverity,
    ServiceError,
    ServiceResult,
)


class BaseService:
    """
    Services own the unit of work: repositories flush, services commit.

    Public operations catch everything and hand it to
    :meth:`_handle_exception`, so callers only ever see a ServiceResult.
    """

    def __init__(self, db_session: Session):
        self.db: Session = db_session
        self._logger = get_logger(f"hostel_allocation.services.{self.__class__.__name__}")

    # -------------------------------------------------------------------------
    # Error handling
    # -------------------------------------------------------------------------

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
    ) -> ServiceResult:
        """
        Turn ``exception`` into a failed ServiceResult.

        Client errors (a BaseAppException below 500) keep their code and
        status and are logged as warnings. Everything else is logged with
        a traceback and answered with a critical failure.
        """
        ref = str(entity_ref) if entity_ref is not None else None
        context = {
            "operation": operation,
            "entity_ref": ref,
            "exception_type": type(exception).__name__,
        }

        if isinstance(exception, BaseAppException) and exception.status_code < 500:
            self._logger.warning(f"{operation} rejected: {exception.message}", extra=context)
            return ServiceResult.from_app_exception(exception)

        self._logger.error(f"Error during {operation}: {exception}", exc_info=True, extra=context)

        if isinstance(exception, BaseAppException):
            return ServiceResult.from_app_exception(exception, severity=ErrorSeverity.CRITICAL)

        code, status_code = self._classify(exception)
        return ServiceResult.failure(
            ServiceError(
                code=code,
                message=f"Failed to {operation}",
                details={"error": str(exception), "entity_ref": ref},
                severity=ErrorSeverity.CRITICAL,
            ),
            status_code=status_code,
        )

    @staticmethod
    def _classify(exception: Exception) -> Tuple[ErrorCode, int]:
        # Unique or foreign-key violation that no repository translated
        if isinstance(exception, IntegrityError):
            return ErrorCode.CONFLICT, 409
        if isinstance(exception, SQLAlchemyError):
            return ErrorCode.DATABASE_ERROR, 500
        return ErrorCode.INTERNAL_ERROR, 500

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Commit on normal exit, roll back and re-raise on any exception.

            with self.transaction():
                self.payments.update(payment, {...})
                self.allocations.update(allocation, {...})
        """
        try:
            yield self.db
            self.db.commit()
        except Exception:
            self._rollback()
            raise

    def _rollback(self) -> None:
        try:
            self.db.rollback()
        except SQLAlchemyError as e:
            # Keep the original error
            self._logger.warning(f"Rollback failed: {e}")
