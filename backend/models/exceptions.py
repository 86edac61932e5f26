"""
Custom domain exceptions for the application.

These exceptions are raised by the service layer and converted to HTTP exceptions
by centralized exception handlers in main.py, maintaining proper separation of concerns.

Each exception carries an ``error_code`` from the RPC error taxonomy
(unauthenticated, permission-denied, invalid-argument, not-found, internal)
so callers outside HTTP (tasks, tests) can branch on it as well.

Enhanced with correlation IDs for Sentry integration and user error reporting.
"""

from core.correlation import generate_correlation_id, get_correlation_id


class DomainException(Exception):
    """
    Base class for all domain exceptions.

    Attributes:
        message: Human-readable error message.
        correlation_id: Unique ID for error tracking (auto-generated if not provided).
    """

    error_code = "internal"

    def __init__(self, message: str, correlation_id: str | None = None):
        self.message = message
        # Use request correlation ID if available, otherwise generate new one
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        super().__init__(self.message)


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    error_code = "not-found"


class PermissionDeniedException(DomainException):
    """Raised when user lacks required permissions."""

    error_code = "permission-denied"


class ValidationException(DomainException):
    """Raised when input validation fails."""

    error_code = "invalid-argument"


class AuthenticationException(DomainException):
    """Raised when authentication fails."""

    error_code = "unauthenticated"


# Specific exceptions for domain entities


class UserNotFoundException(NotFoundException):
    """User not found."""

    def __init__(self, user_id: str):
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class RoomNotFoundException(NotFoundException):
    """Room not found."""

    def __init__(self, room_id: str):
        super().__init__(f"Room {room_id} not found")
        self.room_id = room_id


class ReportNotFoundException(NotFoundException):
    """Report not found."""

    def __init__(self, report_id: str):
        super().__init__(f"Report {report_id} not found")
        self.report_id = report_id


class AnnouncementNotFoundException(NotFoundException):
    """Announcement not found."""

    def __init__(self, announcement_id: str):
        super().__init__(f"Announcement {announcement_id} not found")
        self.announcement_id = announcement_id


class InsufficientPermissionsException(PermissionDeniedException):
    """User doesn't have sufficient permissions."""

    pass


class InvalidTriggerSecretException(AuthenticationException):
    """Internal endpoint called without the shared trigger secret."""

    def __init__(self, message: str = "Invalid trigger secret"):
        super().__init__(message)
