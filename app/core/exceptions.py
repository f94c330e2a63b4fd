"""
Custom Exceptions for the Hostel Gate & Attendance Service

This module defines the exception classes raised by the service layer.
Business-rule rejections each carry their own error code so the API
layer can render a precise message; infrastructure failures are kept in
a separate DatabaseError family.
"""

from typing import Any, Dict, List, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # Authentication & Authorization
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"

    # Database errors
    DATABASE_ERROR = "DATABASE_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"
    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"

    # Attendance errors
    INVALID_COORDINATES = "INVALID_COORDINATES"
    ATTENDANCE_WINDOW_CLOSED = "ATTENDANCE_WINDOW_CLOSED"
    OUT_OF_GEOFENCE = "OUT_OF_GEOFENCE"
    ATTENDANCE_ALREADY_MARKED = "ATTENDANCE_ALREADY_MARKED"

    # Gate pass errors
    TOO_MANY_PENDING_PASSES = "TOO_MANY_PENDING_PASSES"
    PASS_DURATION_EXCEEDED = "PASS_DURATION_EXCEEDED"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"

    # Configuration errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INVALID_CONFIGURATION = "INVALID_CONFIGURATION"


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
# General Application Exceptions
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


class InvalidDateRangeError(ValidationError):
    """Exception raised when date range is invalid"""

    def __init__(
        self,
        message: str = "Invalid date range",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None
    ):
        super().__init__(message, error_code=ErrorCode.INVALID_DATE_RANGE)
        self.details = {
            "start_date": start_date,
            "end_date": end_date
        }


class ResourceNotFoundError(BaseAppException):
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
        super().__init__(message, ErrorCode.RESOURCE_NOT_FOUND, details, 404)


class GatePassNotFoundError(ResourceNotFoundError):
    """Exception raised when a gate pass is not found"""

    def __init__(self, pass_id: Optional[str] = None):
        super().__init__("Gate pass", pass_id)


# ========================================
# Authentication & Authorization Exceptions
# ========================================

class AuthenticationError(BaseAppException):
    """Exception raised when the caller cannot be identified"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, ErrorCode.AUTHENTICATION_FAILED, {}, 401)


class AuthorizationError(BaseAppException):
    """Exception raised when the caller's role does not allow the action"""

    def __init__(
        self,
        message: str = "Insufficient permissions",
        required_roles: Optional[List[str]] = None
    ):
        details = {"required_roles": required_roles} if required_roles else {}
        super().__init__(message, ErrorCode.INSUFFICIENT_PERMISSIONS, details, 403)


# ========================================
# Attendance Exceptions
# ========================================

class InvalidCoordinateError(BaseAppException):
    """Exception raised for malformed or out-of-range GPS coordinates"""

    def __init__(
        self,
        message: str = "Invalid GPS coordinates provided.",
        latitude: Any = None,
        longitude: Any = None
    ):
        details = {"latitude": latitude, "longitude": longitude}
        super().__init__(message, ErrorCode.INVALID_COORDINATES, details, 400)


class WindowClosedError(BaseAppException):
    """Exception raised when attendance is attempted outside the window and its grace period"""

    def __init__(
        self,
        message: str = "Attendance window is closed",
        start_hour: Optional[int] = None,
        end_hour: Optional[int] = None,
        timezone: Optional[str] = None
    ):
        details = {
            "start_hour": start_hour,
            "end_hour": end_hour,
            "timezone": timezone
        }
        super().__init__(message, ErrorCode.ATTENDANCE_WINDOW_CLOSED, details, 400)


class OutOfRangeError(BaseAppException):
    """Exception raised when a location lies outside the hostel geofence"""

    def __init__(
        self,
        distance_meters: float,
        radius_meters: float,
        message: Optional[str] = None
    ):
        if not message:
            message = (
                f"You are {round(distance_meters)}m away from the hostel. "
                f"Please come within {round(radius_meters)}m of the hostel to mark attendance."
            )
        details = {
            "distance_meters": round(distance_meters, 2),
            "radius_meters": radius_meters
        }
        super().__init__(message, ErrorCode.OUT_OF_GEOFENCE, details, 403)


class AlreadyMarkedError(BaseAppException):
    """Exception raised when attendance already exists for the student and day"""

    def __init__(
        self,
        student_id: Optional[str] = None,
        attendance_date: Optional[str] = None,
        message: str = "Attendance already marked for today."
    ):
        details = {
            "student_id": student_id,
            "attendance_date": attendance_date
        }
        super().__init__(message, ErrorCode.ATTENDANCE_ALREADY_MARKED, details, 409)


# ========================================
# Gate Pass Exceptions
# ========================================

class TooManyPendingError(BaseAppException):
    """Exception raised when a student already holds the maximum number of pending passes"""

    def __init__(
        self,
        pending_count: int,
        max_pending: int,
        student_id: Optional[str] = None
    ):
        message = f"You already have {pending_count} pending gate passes (limit {max_pending})"
        details = {
            "student_id": student_id,
            "pending_count": pending_count,
            "max_pending_passes": max_pending
        }
        super().__init__(message, ErrorCode.TOO_MANY_PENDING_PASSES, details, 409)


class DurationExceededError(BaseAppException):
    """Exception raised when a requested gate pass is longer than allowed"""

    def __init__(
        self,
        requested_days: float,
        max_days: int
    ):
        message = f"Gate pass cannot exceed {max_days} days"
        details = {
            "requested_days": round(requested_days, 2),
            "max_gate_pass_days": max_days
        }
        super().__init__(message, ErrorCode.PASS_DURATION_EXCEEDED, details, 422)


class InvalidStateError(BaseAppException):
    """
    Exception raised when a gate pass transition is not allowed from its current state.

    Also raised when a conditional update loses a race: the stored status
    no longer matches the status the caller acted on.
    """

    def __init__(
        self,
        message: str,
        pass_id: Optional[str] = None,
        current_status: Optional[str] = None,
        expected_status: Optional[str] = None
    ):
        details = {
            "pass_id": pass_id,
            "current_status": current_status,
            "expected_status": expected_status
        }
        super().__init__(message, ErrorCode.INVALID_STATE_TRANSITION, details, 409)


# ========================================
# Database Exceptions
# ========================================

class DatabaseError(BaseAppException):
    """Exception raised when database operations fail"""

    def __init__(
        self,
        message: str = "Database operation failed",
        operation: Optional[str] = None,
        table: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        status_code: int = 500
    ):
        details = {
            "operation": operation,
            "table": table
        }
        super().__init__(message, error_code, details, status_code)


class DatabaseConnectionError(DatabaseError):
    """Exception raised when the database cannot be reached"""

    def __init__(
        self,
        message: str = "Database connection failed",
        operation: Optional[str] = None
    ):
        super().__init__(
            message,
            operation=operation,
            error_code=ErrorCode.CONNECTION_ERROR,
            status_code=503
        )


class DuplicateEntityError(DatabaseError):
    """Exception raised when an insert violates a uniqueness constraint"""

    def __init__(
        self,
        message: str = "Entity already exists",
        table: Optional[str] = None
    ):
        super().__init__(
            message,
            operation="insert",
            table=table,
            error_code=ErrorCode.DUPLICATE_ENTRY,
            status_code=409
        )


class ConstraintViolationError(DatabaseError):
    """Exception raised when a write breaks a check, foreign key or not-null constraint"""

    def __init__(
        self,
        message: str = "Integrity constraint violated",
        table: Optional[str] = None
    ):
        super().__init__(
            message,
            operation="write",
            table=table,
            error_code=ErrorCode.CONSTRAINT_VIOLATION,
            status_code=400
        )


# ========================================
# Configuration Exceptions
# ========================================

class ConfigurationError(BaseAppException):
    """Exception raised for configuration errors"""

    def __init__(
        self,
        message: str = "Configuration error",
        config_key: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.CONFIGURATION_ERROR
    ):
        details = {"config_key": config_key} if config_key else {}
        super().__init__(message, error_code, details, 500)


class InvalidConfigurationError(ConfigurationError):
    """Exception raised when configuration value is invalid"""

    def __init__(
        self,
        config_key: str,
        config_value: Any = None,
        message: Optional[str] = None
    ):
        if not message:
            message = f"Invalid configuration value for '{config_key}'"
        super().__init__(message, config_key, ErrorCode.INVALID_CONFIGURATION)
        self.details["config_value"] = None if config_value is None else str(config_value)


# ========================================
# Utility Functions
# ========================================

def handle_database_exception(exc: Exception, operation: Optional[str] = None) -> DatabaseError:
    """Convert driver/ORM exceptions to application database exceptions"""
    error_message = str(exc)

    if "connection" in error_message.lower() or "unable to open" in error_message.lower():
        return DatabaseConnectionError(f"Database connection error: {error_message}", operation)
    return DatabaseError(f"Database error: {error_message}", operation=operation)


# PostgreSQL SQLSTATE for unique_violation
UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(exc: Exception) -> bool:
    """True when an integrity error was raised by a unique or primary key constraint"""
    orig = getattr(exc, "orig", None) or exc
    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE
    message = str(orig).lower()
    return "unique constraint" in message or "duplicate key" in message or "duplicate entry" in message


def handle_integrity_error(exc: Exception, entity_name: str, table: Optional[str] = None) -> DatabaseError:
    """Map an integrity error to ``DuplicateEntityError`` or ``ConstraintViolationError``"""
    if is_unique_violation(exc):
        return DuplicateEntityError(f"{entity_name} already exists", table=table)
    return ConstraintViolationError(f"{entity_name} violates a data constraint", table=table)


def create_validation_error(field_errors: Dict[str, List[str]]) -> ValidationError:
    """Create a validation error with field-specific errors"""
    total_errors = sum(len(errors) for errors in field_errors.values())
    message = f"Validation failed with {total_errors} error(s)"
    return ValidationError(message, field_errors)


__all__ = [
    'ErrorCode',
    'BaseAppException',
    'ValidationError',
    'InvalidDateRangeError',
    'ResourceNotFoundError',
    'GatePassNotFoundError',
    'AuthenticationError',
    'AuthorizationError',
    'InvalidCoordinateError',
    'WindowClosedError',
    'OutOfRangeError',
    'AlreadyMarkedError',
    'TooManyPendingError',
    'DurationExceededError',
    'InvalidStateError',
    'DatabaseError',
    'DatabaseConnectionError',
    'DuplicateEntityError',
    'ConstraintViolationError',
    'ConfigurationError',
    'InvalidConfigurationError',
    'handle_database_exception',
    'is_unique_violation',
    'handle_integrity_error',
    'create_validation_error',
]
