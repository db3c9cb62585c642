"""
Unit Tests for Core Exceptions

Tests the exception hierarchy and its structured-error helpers.
"""

import pytest

from tiercache.core.exceptions import (
    CacheConnectionError,
    CacheError,
    CacheKeyError,
    InvalidArgumentError,
    SerializationError,
    TierCacheError,
)
from tiercache.core.logging.logger import clear_request_id, set_request_id


@pytest.mark.unit
class TestTierCacheError:
    """Test the base exception class."""

    def test_base_error_creation(self):
        error = TierCacheError("Test message")
        assert str(error) == "Test message"

    def test_base_error_default_values(self):
        error = TierCacheError("Test")
        assert error.details == {}  # Defaults to empty dict, not None
        assert error.request_id is None

    def test_details_are_copied(self):
        """Mutating the caller's dict must not change the error."""
        details = {"key": "value"}
        error = TierCacheError("Test", details=details)
        details["key"] = "changed"

        assert error.details == {"key": "value"}

    def test_to_dict(self):
        error = CacheKeyError("GET failed", request_id="req-1", details={"key": "abc"})

        assert error.to_dict() == {
            "error_type": "CacheKeyError",
            "message": "GET failed",
            "request_id": "req-1",
            "details": {"key": "abc"},
        }

    def test_with_suggestion_chains(self):
        error = TierCacheError("Test", details={"attempt": 2}).with_suggestion("Try again")

        assert error.details == {"attempt": 2, "suggestion": "Try again"}

    def test_request_id_taken_from_logging_context(self):
        set_request_id("req-42")
        try:
            error = CacheKeyError("GET failed")
        finally:
            clear_request_id()

        assert error.request_id == "req-42"
        assert error.to_dict()["request_id"] == "req-42"

    def test_explicit_request_id_wins(self):
        set_request_id("req-42")
        try:
            error = CacheKeyError("GET failed", request_id="req-1")
        finally:
            clear_request_id()

        assert error.request_id == "req-1"

    def test_repr_includes_details(self):
        error = CacheKeyError("GET failed", details={"key": "abc"})
        assert repr(error) == "CacheKeyError(message='GET failed', details={'key': 'abc'})"

    def test_from_exception_wraps_original(self):
        original = OSError("connection refused")
        error = CacheConnectionError.from_exception(original, host="127.0.0.1")

        assert isinstance(error, CacheConnectionError)
        assert error.message == "connection refused"
        assert error.details["original_error"] == "OSError"
        assert error.details["host"] == "127.0.0.1"


@pytest.mark.unit
class TestExceptionHierarchy:
    """Test that every cache exception is catchable as CacheError."""

    @pytest.mark.parametrize(
        "exc_class",
        [CacheConnectionError, CacheKeyError, InvalidArgumentError, SerializationError],
    )
    def test_cache_errors_inherit_cache_error(self, exc_class):
        assert issubclass(exc_class, CacheError)
        assert issubclass(exc_class, TierCacheError)

    def test_invalid_argument_is_value_error(self):
        with pytest.raises(ValueError):
            raise InvalidArgumentError("date in the past")
