"""
Sai Ren Agent - Conversational front-end backend
FastAPI + OpenAI completion service + product search + page extraction
"""

from contextlib import asynccontextmanager, suppress
import logging
import asyncio

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from routers import agent
from routers.agent_orchestration import build_runtime
from middleware.single_flight import SingleFlightMiddleware
from errors import install_exception_handlers
from logging_config import setup_logging
from config import runtime_config

setup_logging(runtime_config.log_level)
logger = logging.getLogger(__name__)


async def populate_reference_cache(runtime) -> None:
    """Background task: fill the reference cache from the configured sources."""
    runtime.startup_phase = "populating"
    try:
        await runtime.reference_cache.populate(runtime.config.reference_sources)
    except Exception as e:
        logger.warning(f"Reference cache population failed: {e}; chat will run without reference context")
    finally:
        runtime.startup_phase = "ready"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown events"""
    # Startup: a missing API key stops the process before it takes traffic
    runtime_config.validate()

    runtime = build_runtime(runtime_config)
    app.state.runtime = runtime

    # Requests are served while the cache fills; chat sees partial context
    reference_task = asyncio.create_task(populate_reference_cache(runtime))

    logger.info(f"Sai Ren agent ready on port {runtime_config.port}")

    yield

    # Shutdown
    if not reference_task.done():
        reference_task.cancel()
        with suppress(asyncio.CancelledError):
            await reference_task

    try:
        await runtime.llm.close()
        logger.info("Completion client closed")
    except Exception as e:
        logger.debug(f"Completion client close error: {e}")

    logger.info("Sai Ren agent signing off")


app = FastAPI(
    title="Sai Ren Agent",
    description="Intent-routed assistant: chat, product search, order status",
    version="1.0.0",
    lifespan=lifespan,
)


# Security Headers Middleware
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


app.add_middleware(SecurityHeadersMiddleware)

# Single-flight gate for /extract-text (429 instead of queueing)
app.add_middleware(SingleFlightMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=runtime_config.get_cors_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)

install_exception_handlers(app)

app.include_router(agent.router, tags=["agent"])


@app.get("/health")
async def health(request: Request):
    """Health check - reference cache state and memory size."""
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        return {"status": "starting", "reference_cache": "pending"}

    cache = runtime.reference_cache
    return {
        "status": "healthy",
        "startup_phase": runtime.startup_phase,
        "reference_cache": "complete" if cache.populated else "pending",
        "reference_names": cache.names(),
        "users": runtime.memory.user_count(),
        "model": runtime.config.model_chat,
        "extract_busy": runtime.extract_gate.busy,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=runtime_config.port)
