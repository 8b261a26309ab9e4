"""
ServiceResult: what every public service operation returns.

A failed result carries the error code, message and details of the
exception that caused it, plus the HTTP status in ``metadata`` so the API
layer can answer without knowing the exception types.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from hostel_allocation.core.exceptions import BaseAppException, ErrorCode


class ErrorSeverity(str, Enum):
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


@dataclass
class ServiceError:
    code: ErrorCode
    message: str
    severity: ErrorSeverity = ErrorSeverity.WARNING
    details: Dict[str, Any] = field(default_factory=dict)


TData = TypeVar("TData")


@dataclass
class ServiceResult(Generic[TData]):
    """
    Success/failure envelope.

    Attributes:
        is_success: Operation success indicator
        data: Payload of a successful operation
        error: Error of a failed operation
        message: Human-readable status message
        metadata: Extra context; ``status_code`` drives the HTTP answer
    """

    is_success: bool
    data: Optional[TData] = None
    error: Optional[ServiceError] = None
    message: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, data: Optional[TData] = None, message: Optional[str] = None) -> "ServiceResult[TData]":
        return cls(is_success=True, data=data, message=message)

    @classmethod
    def failure(cls, error: ServiceError, status_code: int = 500) -> "ServiceResult[TData]":
        return cls(
            is_success=False,
            error=error,
            message=error.message,
            metadata={"status_code": status_code},
        )

    @classmethod
    def from_app_exception(
        cls,
        exception: BaseAppException,
        severity: ErrorSeverity = ErrorSeverity.WARNING,
    ) -> "ServiceResult[TData]":
        """Failed result keeping the exception's code, details and status."""
        return cls.failure(
            ServiceError(
                code=exception.error_code,
                message=exception.message,
                severity=severity,
                details=dict(exception.details),
            ),
            status_code=exception.status_code,
        )

    @classmethod
    def not_found(cls, resource_type: str, resource_id: Optional[str] = None) -> "ServiceResult[TData]":
        message = f"{resource_type} not found"
        if resource_id:
            message += f" (ID: {resource_id})"
        return cls.failure(
            ServiceError(
                code=ErrorCode.NOT_FOUND,
                message=message,
                details={"resource_type": resource_type, "resource_id": resource_id},
            ),
            status_code=404,
        )

    @property
    def status_code(self) -> int:
        """HTTP status the API layer should answer with."""
        if self.is_success:
            return 200
        return int(self.metadata.get("status_code", 500))

    def unwrap(self) -> TData:
        """
        Raises:
            ValueError: the result is a failure
        """
        if not self.is_success:
            raise ValueError(f"Cannot unwrap failed result: {self.error.message if self.error else 'unknown error'}")
        return self.data

    def __bool__(self) -> bool:
        return self.is_success
