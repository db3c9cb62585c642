"""
Root of the tiercache exception hierarchy.

Errors carry a message, a details dict for structured logging and the
request ID that was active when they were raised, so a warning logged by
the facade can be correlated with the caller's request.
"""

from typing import Any

from tiercache.core.logging.logger import get_request_id


class TierCacheError(Exception):
    """
    Base exception for all tiered cache errors.

    Attributes:
        message: Error message
        request_id: Request ID for correlation (defaults to the current one)
        details: Additional error details (dict)

    Example:
        raise CacheConnectionError(
            "Failed to connect to memcached",
            details={"host": "127.0.0.1", "port": 11211}
        )
    """

    def __init__(
        self, message: str, request_id: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.request_id = request_id or get_request_id()
        self.details = dict(details or {})
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Structured form used when the facade logs a degraded operation."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "request_id": self.request_id,
            "details": self.details,
        }

    def with_suggestion(self, suggestion: str) -> "TierCacheError":
        """Attach a hint for the caller. Returns self for chaining."""
        self.details["suggestion"] = suggestion
        return self

    def __repr__(self) -> str:
        details_str = f", details={self.details}" if self.details else ""
        request_id_str = f", request_id='{self.request_id}'" if self.request_id else ""
        return f"{self.__class__.__name__}(message='{self.message}'{request_id_str}{details_str})"

    @classmethod
    def from_exception(cls, exc: Exception, message: str | None = None, **details) -> "TierCacheError":
        """
        Wrap a client-library or codec exception.

        Example:
            >>> try:
            ...     pickle.loads(payload)
            ... except pickle.UnpicklingError as e:
            ...     raise SerializationError.from_exception(e, serializer="pickle")
        """
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details,
        }
        return cls(message or str(exc), details=error_details)
