"""
Shared error handling for the Response Cache service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from opentelemetry import trace


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class ResponseCacheException(Exception):
    """Base exception for the Response Cache service."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class ServiceError(ResponseCacheException):
    """Service-related errors."""

    def __init__(self, message: str = "Service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("SERVICE_ERROR", message, details)


class CacheStoreError(ResponseCacheException):
    """The backing key-value store failed to answer."""

    def __init__(self, operation: str, message: str = "Cache store error", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_STORE_ERROR", f"{operation}: {message}", details)
        self.operation = operation


class CacheInvariantError(ResponseCacheException):
    """Internal consistency fault in the cache lifecycle (programming error)."""

    def __init__(self, message: str = "Cache invariant violated", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_INVARIANT_VIOLATION", message, details)


class InvalidSessionIdError(ResponseCacheException):
    """Session hook produced something that cannot scope a cache entry."""

    def __init__(self, message: str = "Session id must be a string or None", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_SESSION_ID", message, details)
