"""
Runtime Configuration for the Sai Ren agent.

Provides a singleton RuntimeConfig class read once from the environment at
process start. Values are copied into the runtime when it is built, so a
change takes effect on restart.

Usage:
    from config import runtime_config
    runtime_config.validate()
    model = runtime_config.model_chat
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_REFERENCE_SOURCES = "FAQ=https://sai-ren-ai-frontend.vercel.app/about-us"


def _first_env(*keys: str, default: str) -> str:
    """Return the first non-empty environment value from keys, else default."""
    for key in keys:
        value = os.environ.get(key, "").strip()
        if value:
            return value
    return default


def _env_bool(key: str, default: str) -> bool:
    return os.environ.get(key, default).strip().lower() in ("1", "true", "yes", "on")


def parse_reference_sources(raw: str) -> List[Dict[str, str]]:
    """
    Parse ``name=url`` pairs separated by commas.

    Entries without a name or URL are skipped with a warning.

    Example:
        >>> parse_reference_sources("FAQ=https://a.example/faq,Policy=https://a.example/p")
        [{'name': 'FAQ', 'url': 'https://a.example/faq'}, {'name': 'Policy', 'url': 'https://a.example/p'}]
    """
    sources = []
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, url = item.partition("=")
        name, url = name.strip(), url.strip()
        if not sep or not name or not url:
            logger.warning(f"Ignoring malformed reference source: {item!r}")
            continue
        sources.append({"name": name, "url": url})
    return sources


@dataclass
class RuntimeConfig:
    """
    Singleton configuration for the agent.

    All values have defaults from environment variables and are read once at
    startup.
    """

    # Completion service
    openai_api_key: str = field(default_factory=lambda: _first_env("API_KEY", "OPENAI_API_KEY", default=""))
    openai_base_url: Optional[str] = field(default_factory=lambda: os.environ.get("OPENAI_BASE_URL") or None)
    model_chat: str = field(default_factory=lambda: _first_env("LLM_CHAT_MODEL", default="gpt-4o-mini"))
    temperature: float = field(default_factory=lambda: float(os.environ.get("LLM_TEMPERATURE", "0.7")))
    llm_timeout_s: float = field(default_factory=lambda: float(os.environ.get("LLM_TIMEOUT_S", "60")))

    # Server
    port: int = field(default_factory=lambda: int(os.environ.get("PORT", "5000")))
    cors_origins: str = field(default_factory=lambda: os.environ.get("CORS_ORIGINS", "*"))
    log_level: str = field(default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO").upper())

    # Product search
    search_api_url: str = field(
        default_factory=lambda: os.environ.get("SEARCH_API_URL", "https://dummyjson.com/products/search")
    )
    search_timeout_s: float = field(default_factory=lambda: float(os.environ.get("SEARCH_TIMEOUT_S", "10")))
    # "recommend" (score-based) or "top_result" (first hit summary)
    search_reply_mode: str = field(
        default_factory=lambda: os.environ.get("SEARCH_REPLY_MODE", "recommend").strip().lower()
    )

    # Order lookup: "fixed" placeholder status or "random" from a small vocabulary
    order_status_mode: str = field(
        default_factory=lambda: os.environ.get("ORDER_STATUS_MODE", "fixed").strip().lower()
    )

    # Reference content extraction
    reference_sources: List[Dict[str, str]] = field(
        default_factory=lambda: parse_reference_sources(
            os.environ.get("REFERENCE_SOURCES", DEFAULT_REFERENCE_SOURCES)
        )
    )
    # "static" (plain HTTP GET) or "rendered" (headless browser)
    extract_strategy: str = field(
        default_factory=lambda: os.environ.get("EXTRACT_STRATEGY", "static").strip().lower()
    )
    extract_filtered: bool = field(default_factory=lambda: _env_bool("EXTRACT_FILTERED", "true"))
    extract_min_chars: int = field(default_factory=lambda: int(os.environ.get("EXTRACT_MIN_CHARS", "20")))
    extract_concurrency: int = field(default_factory=lambda: int(os.environ.get("EXTRACT_CONCURRENCY", "1")))
    fetch_timeout_s: float = field(default_factory=lambda: float(os.environ.get("FETCH_TIMEOUT_S", "15")))
    render_timeout_s: float = field(default_factory=lambda: float(os.environ.get("RENDER_TIMEOUT_S", "30")))

    # Conversation memory bound (0 = unbounded)
    max_turns_per_user: int = field(default_factory=lambda: int(os.environ.get("MAX_TURNS_PER_USER", "200")))

    # Validation ranges for numeric config values
    _VALIDATION_RANGES: Dict[str, tuple] = field(default_factory=lambda: {
        "temperature": (0.0, 2.0),
        "llm_timeout_s": (1.0, 600.0),
        "search_timeout_s": (1.0, 120.0),
        "fetch_timeout_s": (1.0, 120.0),
        "render_timeout_s": (1.0, 300.0),
        "extract_min_chars": (0, 10000),
        "extract_concurrency": (1, 32),
        "max_turns_per_user": (0, 100000),
    }, repr=False, compare=False)

    _CHOICES: Dict[str, tuple] = field(default_factory=lambda: {
        "search_reply_mode": ("recommend", "top_result"),
        "order_status_mode": ("fixed", "random"),
        "extract_strategy": ("static", "rendered"),
    }, repr=False, compare=False)

    def validate(self) -> None:
        """
        Validate settings that must be correct before serving traffic.

        Raises:
            ConfigError: If the completion service API key is missing, a mode
                setting holds an unknown value, or a numeric setting is out
                of range.
        """
        from errors import ConfigError

        if not self.openai_api_key:
            raise ConfigError(
                "API_KEY is required",
                details="Set API_KEY (or OPENAI_API_KEY) in the environment",
                setting="API_KEY",
            )

        for key, choices in self._CHOICES.items():
            if getattr(self, key) not in choices:
                raise ConfigError(
                    f"Invalid value for {key}: {getattr(self, key)!r}",
                    details=f"Expected one of {', '.join(choices)}",
                    setting=key,
                )

        for key, (lo, hi) in self._VALIDATION_RANGES.items():
            value = getattr(self, key)
            if not (lo <= value <= hi):
                raise ConfigError(
                    f"Invalid value for {key}: {value}",
                    details=f"Must be between {lo} and {hi}",
                    setting=key,
                )

    def get_cors_origins(self) -> List[str]:
        """Split the comma-separated CORS origin list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()] or ["*"]


# Singleton instance
runtime_config = RuntimeConfig()
