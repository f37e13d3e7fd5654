"""
Standard response builders for the agent API.

Every error body carries a human-readable ``error`` string so callers can
surface it directly; the structured code rides alongside it.
"""

from typing import Any, Optional
from .codes import ErrorCode
from .exceptions import AgentError


def error_response(error: AgentError | Exception | str, include_context: bool = False) -> dict:
    """Build a standard error response dictionary.

    Args:
        error: The exception (or bare message) to convert to a response
        include_context: Whether to include the context dict (off by default for privacy)

    Returns:
        Error response dict with an ``error`` message string

    Example:
        >>> from errors import ValidationError, error_response
        >>> err = ValidationError("Input and User ID are required", parameter="input")
        >>> error_response(err)
        {"error": "Input and User ID are required", "code": "VALIDATION_MISSING_PARAM"}
    """
    if isinstance(error, AgentError):
        body = {"error": error.message, "code": error.code.value}
        if error.details:
            body["details"] = error.details
        if include_context and error.context:
            body["context"] = error.context
        return body

    if isinstance(error, str):
        return {"error": error}

    # Fallback for unexpected exceptions: never leak internals
    return {"error": "Internal server error", "code": ErrorCode.INTERNAL_UNEXPECTED.value}


def success_response(data: Optional[dict] = None, **kwargs: Any) -> dict:
    """Build a success response dictionary.

    Args:
        data: Optional data dict to include in response
        **kwargs: Additional key-value pairs to include at top level

    Example:
        >>> success_response(reply="Hello")
        {"reply": "Hello"}
    """
    response: dict = {}

    if data:
        response.update(data)
    if kwargs:
        response.update(kwargs)

    return response
