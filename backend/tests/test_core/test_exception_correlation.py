"""Tests for exception correlation IDs and error codes."""

import pytest

from core.correlation import set_correlation_id
from models.exceptions import (
    AnnouncementNotFoundException,
    AuthenticationException,
    DomainException,
    InsufficientPermissionsException,
    InvalidTriggerSecretException,
    NotFoundException,
    PermissionDeniedException,
    ReportNotFoundException,
    RoomNotFoundException,
    ValidationException,
)


class TestDomainExceptionCorrelationId:
    """Tests for correlation ID in DomainException."""

    def setup_method(self) -> None:
        """Reset correlation context before each test."""
        set_correlation_id("")

    def test_uses_context_correlation_id(self) -> None:
        set_correlation_id("context1")

        assert DomainException("Test error").correlation_id == "context1"

    def test_generates_id_when_no_context(self) -> None:
        exc = DomainException("Test error")

        assert len(exc.correlation_id) == 8
        assert all(c in "0123456789abcdef" for c in exc.correlation_id)

    def test_explicit_overrides_context(self) -> None:
        set_correlation_id("context_id")

        exc = DomainException("Test error", correlation_id="override")
        assert exc.correlation_id == "override"


class TestErrorCodes:
    """Each exception family maps to one RPC error code."""

    @pytest.mark.parametrize(
        "exc, code",
        [
            (DomainException("x"), "internal"),
            (NotFoundException("x"), "not-found"),
            (RoomNotFoundException("r1"), "not-found"),
            (ReportNotFoundException("p1"), "not-found"),
            (AnnouncementNotFoundException("a1"), "not-found"),
            (PermissionDeniedException("x"), "permission-denied"),
            (InsufficientPermissionsException("x"), "permission-denied"),
            (ValidationException("x"), "invalid-argument"),
            (AuthenticationException("x"), "unauthenticated"),
            (InvalidTriggerSecretException(), "unauthenticated"),
        ],
    )
    def test_error_code(self, exc: DomainException, code: str) -> None:
        assert exc.error_code == code

    def test_not_found_message(self) -> None:
        exc = RoomNotFoundException("r1")

        assert exc.message == "Room r1 not found"
        assert exc.room_id == "r1"
