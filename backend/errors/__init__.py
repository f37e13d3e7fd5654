"""
Sai Ren Agent Error Handling Module

Provides standardized error codes, exceptions, and response builders
for consistent error handling across the application.

Usage:
    from errors import (
        ErrorCode,
        AgentError,
        ValidationError,
        LLMError,
        ExternalServiceError,
        ExtractionError,
        BusyError,
        ConfigError,
        error_response,
        success_response,
        handle_async_handler_errors,
        install_exception_handlers,
    )

Example:
    from errors import handle_async_handler_errors, ExternalServiceError

    @handle_async_handler_errors("search", "Failed to retrieve search results")
    async def run_search(query):
        resp = await client.get(url)
        if resp.status_code != 200:
            raise ExternalServiceError("Search failed", service="search", status_code=resp.status_code)
        return {"reply": "...", "results": [...]}
"""

from .codes import ErrorCode
from .exceptions import (
    AgentError,
    ValidationError,
    LLMError,
    ExternalServiceError,
    ExtractionError,
    BusyError,
    ConfigError,
)
from .response import (
    error_response,
    success_response,
)
from .handlers import (
    handle_async_handler_errors,
    install_exception_handlers,
)

__all__ = [
    # Error codes
    "ErrorCode",
    # Exceptions
    "AgentError",
    "ValidationError",
    "LLMError",
    "ExternalServiceError",
    "ExtractionError",
    "BusyError",
    "ConfigError",
    # Response builders
    "error_response",
    "success_response",
    # Decorators
    "handle_async_handler_errors",
    "install_exception_handlers",
]
