"""
Custom Exceptions for the Hostel Allocation Engine

This module defines the exception taxonomy used by the allocation,
lifecycle and payment layers. Every exception carries a stable error
code and the HTTP status the API layer should answer with.
"""

from typing import Any, Dict, List, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    OPERATION_FAILED = "OPERATION_FAILED"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_STATE = "INVALID_STATE"

    # Lookup errors
    NOT_FOUND = "NOT_FOUND"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"
    CONFLICT = "CONFLICT"

    # Allocation rules
    CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
    GENDER_MISMATCH = "GENDER_MISMATCH"
    DUPLICATE_ALLOCATION = "DUPLICATE_ALLOCATION"

    # Settings
    DATE_PARSE_ERROR = "DATE_PARSE_ERROR"
    WINDOW_CLOSED = "WINDOW_CLOSED"

    # Payments / webhooks
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    PAYMENT_GATEWAY_ERROR = "PAYMENT_GATEWAY_ERROR"

    # Throttling
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


# ========================================
# Input / Lookup
# ========================================

class ValidationError(BaseAppException):
    """Exception raised when data validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        status_code: int = 422
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, error_code, details, status_code)


class NotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[str] = None,
        message: Optional[str] = None
    ):
        if not message:
            message = f"{resource_type} not found"
            if resource_id:
                message += f" (ID: {resource_id})"

        details = {
            "resource_type": resource_type,
            "resource_id": resource_id
        }
        super().__init__(message, ErrorCode.NOT_FOUND, details, 404)


class InvalidStateTransitionError(BaseAppException):
    """Exception raised when an entity is moved along an illegal lifecycle edge"""

    def __init__(
        self,
        entity: str,
        current: Optional[str],
        target: str,
        message: Optional[str] = None
    ):
        if not message:
            message = f"{entity} cannot move from {current or 'none'} to {target}"
        details = {"entity": entity, "current": current, "target": target}
        super().__init__(message, ErrorCode.INVALID_STATE, details, 409)


class ConflictError(BaseAppException):
    """Exception raised when a request conflicts with existing data"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.CONFLICT, details, 409)


class WindowClosedError(BaseAppException):
    """Exception raised when an operation is attempted outside its admission window"""

    def __init__(self, window: str, status: str):
        super().__init__(
            f"The {window} window is {status}",
            ErrorCode.WINDOW_CLOSED,
            {"window": window, "status": status},
            403
        )


# ========================================
# Allocation Rules
# ========================================

class CapacityExceededError(BaseAppException):
    """Exception raised when a conditional allocation write finds the room full"""

    def __init__(
        self,
        room_id: str,
        capacity: Optional[int] = None,
        occupancy: Optional[int] = None,
        message: str = "Room is at full capacity"
    ):
        details = {"room_id": room_id, "capacity": capacity, "occupancy": occupancy}
        super().__init__(message, ErrorCode.CAPACITY_EXCEEDED, details, 409)


class GenderMismatchError(BaseAppException):
    """Exception raised when a user's gender is not accepted by the hostel"""

    def __init__(self, user_gender: Optional[str], hostel_gender: str):
        super().__init__(
            f"Hostel for {hostel_gender} residents cannot house a {user_gender or 'unspecified'} student",
            ErrorCode.GENDER_MISMATCH,
            {"user_gender": user_gender, "hostel_gender": hostel_gender},
            409
        )


class DuplicateAllocationError(BaseAppException):
    """Exception raised when a user already holds an active allocation"""

    def __init__(self, user_id: str, allocation_id: Optional[str] = None):
        super().__init__(
            "Student already has an active allocation",
            ErrorCode.DUPLICATE_ALLOCATION,
            {"user_id": user_id, "allocation_id": allocation_id},
            409
        )


# ========================================
# Settings / Payments
# ========================================

class DateParseError(BaseAppException):
    """Exception raised when a date setting cannot be interpreted"""

    def __init__(self, raw_value: Any, message: Optional[str] = None):
        super().__init__(
            message or f"Unparsable date setting: {raw_value!r}",
            ErrorCode.DATE_PARSE_ERROR,
            {"raw_value": repr(raw_value)},
            422
        )


class SignatureError(BaseAppException):
    """Exception raised when a webhook signature is missing or invalid"""

    def __init__(self, message: str = "Invalid signature"):
        super().__init__(message, ErrorCode.INVALID_SIGNATURE, {}, 400)


class PaymentGatewayError(BaseAppException):
    """Exception raised when the payment gateway call fails"""

    def __init__(
        self,
        message: str = "Payment gateway request failed",
        gateway: str = "paystack",
        details: Optional[Dict[str, Any]] = None
    ):
        payload = {"gateway": gateway}
        payload.update(details or {})
        super().__init__(message, ErrorCode.PAYMENT_GATEWAY_ERROR, payload, 502)


class RateLimitExceeded(BaseAppException):
    """Exception raised when an identifier exceeds its request budget"""

    def __init__(self, retry_after: int, limit: int):
        super().__init__(
            "Too many requests",
            ErrorCode.RATE_LIMIT_EXCEEDED,
            {"retry_after": retry_after, "limit": limit},
            429
        )


# ========================================
# Persistence
# ========================================

class RepositoryError(BaseAppException):
    """Exception raised when the persistent store fails"""

    def __init__(self, message: str = "Database operation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorCode.DATABASE_ERROR, details, 500)


__all__ = [
    "ErrorCode",
    "BaseAppException",
    "ValidationError",
    "NotFoundError",
    "InvalidStateTransitionError",
    "ConflictError",
    "WindowClosedError",
    "CapacityExceededError",
    "GenderMismatchError",
    "DuplicateAllocationError",
    "DateParseError",
    "SignatureError",
    "PaymentGatewayError",
    "RateLimitExceeded",
    "RepositoryError",
]
