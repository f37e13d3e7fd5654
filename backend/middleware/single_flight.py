"""
Single-Flight Gate - Bounded concurrency with immediate rejection.

Guards expensive endpoints (headless page extraction) so that at most
``capacity`` requests run at once. Excess callers are rejected with 429
right away instead of being queued.

Usage:
    # REST middleware (gates resolved from app.state.runtime)
    app.add_middleware(SingleFlightMiddleware)

    # Direct use
    async with gate.hold():
        await expensive()
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from errors import BusyError, error_response

logger = logging.getLogger(__name__)


class SingleFlightGate:
    """Counts in-flight holders; never blocks, rejects when full."""

    def __init__(self, name: str, capacity: int = 1):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.name = name
        self.capacity = capacity
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def busy(self) -> bool:
        return self._in_flight >= self.capacity

    def try_acquire(self) -> bool:
        # Check and increment happen with no await in between
        if self.busy:
            return False
        self._in_flight += 1
        return True

    def release(self) -> None:
        if self._in_flight > 0:
            self._in_flight -= 1

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[None]:
        """Occupy a slot for the block; released on every exit path.

        Raises:
            BusyError: If all slots are taken
        """
        if not self.try_acquire():
            raise BusyError(
                "Server is busy processing another request. Please try again later.",
                gate=self.name,
            )
        try:
            yield
        finally:
            self.release()


def _resolve_gate(request: Request, attr: str) -> Optional[SingleFlightGate]:
    runtime = getattr(request.app.state, "runtime", None)
    return getattr(runtime, attr, None) if runtime is not None else None


class SingleFlightMiddleware(BaseHTTPMiddleware):
    """
    Single-flight middleware for REST endpoints.

    Paths map to the AgentRuntime attribute holding their gate.
    """

    GATED_PATHS = {
        "/extract-text": "extract_gate",
    }

    async def dispatch(self, request: Request, call_next) -> Response:
        attr = self.GATED_PATHS.get(request.url.path)
        gate = _resolve_gate(request, attr) if attr and request.method == "POST" else None
        if gate is None:
            return await call_next(request)

        try:
            async with gate.hold():
                return await call_next(request)
        except BusyError as e:
            logger.warning(f"Single-flight gate '{gate.name}' busy, rejecting {request.url.path}")
            return JSONResponse(status_code=e.status_code, content=error_response(e))
