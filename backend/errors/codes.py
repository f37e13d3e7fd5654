"""
Error codes for the Sai Ren agent.

Provides a standardized taxonomy of error codes organized by category.
Use these codes consistently across all error responses.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Standardized error codes.

    Categories:
    - VALIDATION_*: Request validation errors
    - LLM_*: Completion service errors
    - EXTERNAL_*: Search API, page fetch and render errors
    - RESOURCE_*: Contention on guarded endpoints
    - INTERNAL_*: Internal/unexpected errors
    """

    # Validation errors (request checking)
    VALIDATION_MISSING_PARAM = "VALIDATION_MISSING_PARAM"
    VALIDATION_INVALID_FORMAT = "VALIDATION_INVALID_FORMAT"

    # LLM errors (completion service)
    LLM_UNAVAILABLE = "LLM_UNAVAILABLE"
    LLM_TIMEOUT = "LLM_TIMEOUT"
    LLM_RESPONSE_INVALID = "LLM_RESPONSE_INVALID"

    # External service errors
    EXTERNAL_SEARCH_FAILED = "EXTERNAL_SEARCH_FAILED"
    EXTERNAL_FETCH_FAILED = "EXTERNAL_FETCH_FAILED"
    EXTERNAL_RENDER_FAILED = "EXTERNAL_RENDER_FAILED"
    EXTERNAL_NETWORK_ERROR = "EXTERNAL_NETWORK_ERROR"

    # Contention
    RESOURCE_BUSY = "RESOURCE_BUSY"

    # Internal errors (unexpected failures)
    INTERNAL_UNEXPECTED = "INTERNAL_UNEXPECTED"
    INTERNAL_CONFIG_ERROR = "INTERNAL_CONFIG_ERROR"
