"""
Custom exception hierarchy for the Sai Ren agent.

All exceptions inherit from AgentError and include:
- code: ErrorCode for categorization
- message: Human-readable error message
- details: Optional additional context
- recoverable: Whether the user can retry/fix the issue
- status_code: HTTP status used when the error reaches the API surface
- context: Additional key-value pairs for debugging
"""

from typing import Any, Optional
from .codes import ErrorCode


class AgentError(Exception):
    """Base exception for all agent errors.

    Attributes:
        code: The ErrorCode categorizing this error
        message: Human-readable error message
        details: Optional additional context for the user
        recoverable: Whether the error can be resolved by user action
        status_code: HTTP status code for the API layer
        context: Additional debugging information
    """

    code: ErrorCode = ErrorCode.INTERNAL_UNEXPECTED
    recoverable: bool = False
    status_code: int = 500

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        recoverable: Optional[bool] = None,
        **context: Any,
    ):
        self.message = message
        self.details = details
        self.context = context if context else None

        # Allow overriding class defaults
        if code is not None:
            self.code = code
        if recoverable is not None:
            self.recoverable = recoverable

        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} - {self.details}"
        return self.message

    def to_dict(self) -> dict:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "context": self.context,
        }


class ValidationError(AgentError):
    """A request is missing a required field or carries a malformed one."""

    code = ErrorCode.VALIDATION_MISSING_PARAM
    recoverable = True
    status_code = 400

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        parameter: Optional[str] = None,
        expected: Optional[str] = None,
        received: Optional[str] = None,
        **context: Any,
    ):
        ctx = {**context}
        if parameter:
            ctx["parameter"] = parameter
        if expected:
            ctx["expected"] = expected
        if received:
            ctx["received"] = received
        super().__init__(message, details, **ctx)


class LLMError(AgentError):
    """Error during completion service interactions."""

    code = ErrorCode.LLM_UNAVAILABLE
    recoverable = False
    status_code = 502

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        model: Optional[str] = None,
        error_type: Optional[str] = None,
        **context: Any,
    ):
        if error_type == "timeout":
            code = ErrorCode.LLM_TIMEOUT
        elif error_type == "invalid":
            code = ErrorCode.LLM_RESPONSE_INVALID
        else:
            code = ErrorCode.LLM_UNAVAILABLE

        ctx = {**context}
        if model:
            ctx["model"] = model
        super().__init__(message, details, code=code, **ctx)


class ExternalServiceError(AgentError):
    """Error with external services (product search, page fetch, renderer)."""

    code = ErrorCode.EXTERNAL_NETWORK_ERROR
    recoverable = True
    status_code = 502

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        service: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        if service == "search":
            code = ErrorCode.EXTERNAL_SEARCH_FAILED
        elif service == "fetch":
            code = ErrorCode.EXTERNAL_FETCH_FAILED
        elif service == "render":
            code = ErrorCode.EXTERNAL_RENDER_FAILED
        else:
            code = ErrorCode.EXTERNAL_NETWORK_ERROR

        ctx = {**context}
        if service:
            ctx["service"] = service
        if status_code:
            ctx["upstream_status"] = status_code
        super().__init__(message, details, code=code, **ctx)


class ExtractionError(ExternalServiceError):
    """No usable text could be extracted from a page."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        url: Optional[str] = None,
        service: str = "fetch",
        **context: Any,
    ):
        ctx = {**context}
        if url:
            ctx["url"] = url
        super().__init__(message, details, service=service, **ctx)


class BusyError(AgentError):
    """A guarded operation is already running at capacity."""

    code = ErrorCode.RESOURCE_BUSY
    recoverable = True
    status_code = 429


class ConfigError(AgentError):
    """Startup configuration is unusable (e.g. missing credentials)."""

    code = ErrorCode.INTERNAL_CONFIG_ERROR
    recoverable = False
    status_code = 500

    def __init__(self, message: str, details: Optional[str] = None, setting: Optional[str] = None, **context: Any):
        ctx = {**context}
        if setting:
            ctx["setting"] = setting
        super().__init__(message, details, **ctx)
