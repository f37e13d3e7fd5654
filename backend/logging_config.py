"""
Sai Ren Agent Logging Configuration - Color-Coded Logs

Provides:
- ColorFormatter: ANSI color-coded log output
- Helper functions: log_message_in, log_message_out, log_action, log_llm, log_extract
- setup_logging(): Configure application logging

Usage:
    from logging_config import setup_logging, log_message_in, log_action
    setup_logging()
    logger = logging.getLogger(__name__)
    log_message_in(logger, "Where is my order 123?", user="u-1")
"""

import logging
import sys

# ANSI color codes
COLORS = {
    "RESET": "\033[0m",
    "BOLD": "\033[1m",
    "DIM": "\033[2m",
    # Event colors
    "MSG_IN": "\033[96m",  # Cyan - incoming message
    "MSG_OUT": "\033[92m",  # Green - outgoing response
    "ACTION": "\033[95m",  # Magenta - routing decision
    "EXTRACT": "\033[93m",  # Yellow - page extraction
    "LLM": "\033[94m",  # Blue - completion calls
    "ERROR": "\033[91m",  # Red - errors
    "WARN": "\033[33m",  # Orange/Yellow - warnings
    "DEBUG": "\033[90m",  # Gray - debug info
}


class ColorFormatter(logging.Formatter):
    """Custom formatter with colors for different log levels."""

    LEVEL_COLORS = {
        logging.DEBUG: COLORS["DEBUG"],
        logging.INFO: COLORS["RESET"],
        logging.WARNING: COLORS["WARN"],
        logging.ERROR: COLORS["ERROR"],
        logging.CRITICAL: COLORS["ERROR"] + COLORS["BOLD"],
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, COLORS["RESET"])

        # Format: timestamp [LEVEL] message (no module name for compactness)
        timestamp = self.formatTime(record, "%H:%M:%S")
        level = record.levelname[:4]

        formatted = (
            f"{COLORS['DIM']}{timestamp}{COLORS['RESET']} "
            f"[{color}{level}{COLORS['RESET']}] "
            f"{record.getMessage()}"
        )

        if record.exc_info:
            formatted += "\n" + self.formatException(record.exc_info)

        return formatted


def setup_logging(level: int | str = logging.INFO) -> None:
    """Configure colored logging for the application."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ColorFormatter())

    # Configure root logger
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    # Quiet noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("selenium").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# =============================================================================
# COLORED LOG HELPER FUNCTIONS
# =============================================================================


def log_message_in(logger: logging.Logger, message: str, **context) -> None:
    """Log incoming user message.

    Args:
        logger: Logger instance
        message: User message text
        **context: Additional context (user, endpoint, etc.)
    """
    preview = message[:80] + "..." if len(message) > 80 else message
    ctx = " ".join(f"{k}={v}" for k, v in context.items())
    logger.info(f"{COLORS['MSG_IN']}>>> MESSAGE{COLORS['RESET']} {preview} [{ctx}]")


def log_message_out(logger: logging.Logger, action: str, chars: int = 0, error: bool = False) -> None:
    """Log outgoing response.

    Args:
        logger: Logger instance
        action: Action label that produced the response
        chars: Reply length
        error: Whether the body reports a failure
    """
    logger.info(
        f"{COLORS['MSG_OUT']}<<< RESPONSE{COLORS['RESET']} "
        f"action={action} chars={chars} error={error}"
    )


def log_action(logger: logging.Logger, action: str, raw: str = "", fallback: bool = False) -> None:
    """Log a routing decision.

    Args:
        logger: Logger instance
        action: Resolved action label
        raw: Raw classifier output
        fallback: Whether the default action was substituted
    """
    suffix = f" (fallback from {raw!r})" if fallback else ""
    logger.info(f"{COLORS['ACTION']}--> ACTION{COLORS['RESET']} {action}{suffix}")


def log_extract(logger: logging.Logger, name: str, state: str, **context) -> None:
    """Log page extraction.

    Args:
        logger: Logger instance
        name: Source name or URL
        state: 'start', 'end' or 'failed'
        **context: Additional context (chars, strategy, etc.)
    """
    ctx = " ".join(f"{k}={v}" for k, v in context.items()) if context else ""
    if state == "start":
        logger.info(f"{COLORS['EXTRACT']}>>> EXTRACT{COLORS['RESET']} {name} {ctx}")
    elif state == "failed":
        logger.warning(f"{COLORS['EXTRACT']}!!! EXTRACT{COLORS['RESET']} {name} failed {ctx}")
    else:
        logger.info(f"{COLORS['EXTRACT']}<<< EXTRACT{COLORS['RESET']} {name} {ctx}")


def log_llm(
    logger: logging.Logger,
    state: str,
    model: str = "",
    duration: float = 0,
) -> None:
    """Log completion call.

    Args:
        logger: Logger instance
        state: 'start' or 'end'
        model: Model name
        duration: Call duration in seconds (for end state)
    """
    if state == "start":
        logger.info(f"{COLORS['LLM']}>>> LLM{COLORS['RESET']} calling {model}")
    else:
        logger.info(f"{COLORS['LLM']}<<< LLM{COLORS['RESET']} " f"{model} completed in {duration:.1f}s")
