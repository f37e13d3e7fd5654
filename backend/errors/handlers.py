"""
Error handling decorators and utilities.

Provides a decorator that keeps action handlers from leaking exceptions:
a handler failure becomes an error-shaped JSON body, never a crashed request.
"""

import logging
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from .codes import ErrorCode
from .exceptions import AgentError, ValidationError

# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., Any])


def handle_async_handler_errors(
    handler_name: str,
    fallback_message: str,
    logger: Optional[logging.Logger] = None,
):
    """Decorator that converts handler exceptions into ``{"error": ...}`` bodies.

    Args:
        handler_name: Name of the handler, used in log lines
        fallback_message: User-facing message returned on failure
        logger: Optional logger instance (defaults to a handler-specific logger)

    Returns:
        Decorated async function that returns ``{"error": fallback_message}`` on exception

    Example:
        >>> @handle_async_handler_errors("search", "Failed to retrieve search results")
        ... async def run_search(query):
        ...     ...
    """

    def decorator(func: F) -> F:
        log = logger or logging.getLogger(f"agent.{handler_name}")

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> dict:
            try:
                return await func(*args, **kwargs)
            except AgentError as e:
                log.error(f"[{handler_name}] {e.code.value}: {e}")
                return {"error": fallback_message}
            except Exception as e:
                log.error(f"[{handler_name}] Unexpected error: {e}", exc_info=True)
                return {"error": fallback_message}

        return wrapper  # type: ignore

    return decorator


def install_exception_handlers(app) -> None:
    """Map exceptions escaping a route onto JSON error bodies.

    - ``AgentError`` -> its ``status_code`` with ``error_response``
    - malformed request bodies -> 400
    - anything else -> 500 ``{"error": "Internal server error"}``
    """
    from fastapi import Request
    from fastapi.exceptions import RequestValidationError
    from fastapi.responses import JSONResponse

    from .response import error_response

    log = logging.getLogger("agent.http")

    @app.exception_handler(AgentError)
    async def _agent_error(request: Request, exc: AgentError):
        log.warning(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code.value}: {exc}")
        return JSONResponse(status_code=exc.status_code, content=error_response(exc))

    @app.exception_handler(RequestValidationError)
    async def _bad_request(request: Request, exc: RequestValidationError):
        err = ValidationError("Malformed request body", code=ErrorCode.VALIDATION_INVALID_FORMAT)
        log.warning(f"{request.method} {request.url.path} -> 400 {err.code.value}")
        return JSONResponse(status_code=err.status_code, content=error_response(err))

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        log.error(f"{request.method} {request.url.path} -> 500: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
