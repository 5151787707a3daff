"""
LeetNotes Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions, one per failure kind the API reports.
How:   Each exception carries a user-facing message, an optional `details`
       string returned to the client, and a `context` dict that is logged
       server-side only. Global handlers in main.py turn them into JSON.
Who:   Raised by services and dependencies; caught by global handlers.

Exception Hierarchy:
    LeetNotesError (base)                 → 500
    ├── ValidationError                   → 400 Bad Request
    ├── AuthenticationError               → 401 Unauthorized
    ├── NotFoundError                     → 404 Not Found
    ├── RateLimitExceededError            → 429 Too Many Requests
    ├── ConfigurationError                → 500 (missing API key / URL)
    ├── ScraperError                      → 500 (fetcher failed)
    │   └── ScraperOutputError            → 500 (fetcher stdout unusable)
    ├── DatabaseError                     → 500 (store error passed through)
    ├── LLMResponseError                  → 500 (Gemini answer unusable)
    ├── LLMServiceError                   → 502 Bad Gateway
    └── CircuitBreakerOpenError           → 503 Service Unavailable

Response body produced by the handlers:
    {"error": message, "details": details, "code": code, "request_id": rid}
"""

from typing import Any, Dict, Optional


class LeetNotesError(Exception):
    """
    Base exception for all LeetNotes application errors.

    Attributes:
        message:  User-facing error description
        details:  Optional extra explanation returned as the `details` field
        context:  Debug info for the logs (never returned to the client)
    """

    status_code: int = 500
    code: str = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.details = details
        self.context = context or {}
        super().__init__(self.message)

    def to_body(self, request_id: str = "") -> Dict[str, Any]:
        """JSON body for the HTTP response (context is deliberately left out)."""
        return {
            "error": self.message,
            "details": self.details,
            "code": self.code,
            "request_id": request_id,
        }


class ValidationError(LeetNotesError):
    """Client input is missing or malformed (body fields, path parameters)."""

    status_code = 400
    code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, details=details, context=ctx)
        self.field = field


class AuthenticationError(LeetNotesError):
    """
    Bearer token is missing, malformed, invalid, or expired.

    Raised by the `get_current_user` dependency before any route logic runs.
    """

    status_code = 401
    code = "unauthorized"

    def __init__(
        self,
        message: str = "Invalid or expired token",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, details=details, context=context)


class NotFoundError(LeetNotesError):
    """
    A requested resource does not exist for the authenticated user.

    Rows belonging to another user are reported as not found, never as
    forbidden, so ids of other users' data are not disclosed.
    """

    status_code = 404
    code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        details = None
        if resource_id:
            details = f"{resource.capitalize()} with ID {resource_id} not found for this user."
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, details=details, context=ctx)


class RateLimitExceededError(LeetNotesError):
    """Client exceeded the per-IP limit on the expensive endpoints."""

    status_code = 429
    code = "rate_limit_exceeded"

    def __init__(self, retry_after: int = 60, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Too many requests",
            details=f"Please wait {retry_after} seconds before retrying.",
            context=context,
        )
        self.retry_after = retry_after


class ConfigurationError(LeetNotesError):
    """A required setting (API key, service URL) is not configured on the server."""

    code = "configuration_error"

    def __init__(
        self,
        message: str = "Server configuration error",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, details=details, context=context)


class ScraperError(LeetNotesError):
    """
    The external LeetCode fetcher could not produce data.

    Covers a failed or timed-out process, fatal markers on stderr
    ("Authentication failed", "Rate limited", tracebacks) and empty stdout.
    The fetcher's raw output goes to the logs through `context` only.
    """

    code = "scraper_error"

    def __init__(
        self,
        message: str = "Failed to execute Python script",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, details=details, context=context)


class ScraperOutputError(ScraperError):
    """Fetcher stdout is not valid JSON or does not match the expected schema."""

    code = "scraper_output_error"

    def __init__(
        self,
        message: str = "Invalid data format from fetcher script",
        details: Optional[str] = "Failed to process data. Check server logs.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, details=details, context=context)


class DatabaseError(LeetNotesError):
    """
    A store operation failed.

    `details` carries the store's own error message unchanged.
    """

    code = "database_error"

    def __init__(
        self,
        message: str = "A database error occurred",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, details=details, context=context)


class LLMResponseError(LeetNotesError):
    """Gemini answered, but the response has no usable candidate text."""

    code = "llm_response_error"

    def __init__(
        self,
        message: str = "Failed to parse response from AI service.",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, details=details, context=context)


class LLMServiceError(LeetNotesError):
    """
    Gemini could not be reached, rejected the call, or blocked the content.

    HTTP 502: the upstream AI service is at fault, not this server.
    """

    status_code = 502
    code = "llm_service_error"

    def __init__(
        self,
        message: str = "Failed to communicate with AI service.",
        details: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, details=details, context=context)


class CircuitBreakerOpenError(LeetNotesError):
    """
    The Gemini circuit breaker is OPEN after repeated consecutive failures.

    Calls are rejected immediately until `recovery_time` seconds pass.
    """

    status_code = 503
    code = "service_unavailable"

    def __init__(self, recovery_time: int = 60, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["recovery_time"] = recovery_time
        super().__init__(
            message="AI service is temporarily unavailable due to repeated failures.",
            details=f"Retry in approximately {recovery_time} seconds.",
            context=ctx,
        )
        self.recovery_time = recovery_time
