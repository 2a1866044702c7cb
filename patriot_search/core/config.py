"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes"}


class ConfigError(RuntimeError):
    """Raised when mandatory configuration is missing."""


@dataclass(frozen=True)
class Settings:
    search_api_url: str
    google_api_key: str
    request_timeout: float = 10.0
    port: int = 8080
    include_external_places: bool = False
    show_only_with_incentives: bool = True
    log_level: str = "INFO"


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    search_api_url = os.getenv("SEARCH_API_URL", "").rstrip("/")
    google_api_key = os.getenv("GOOGLE_API_KEY", "")
    request_timeout = float(os.getenv("REQUEST_TIMEOUT", "10"))
    port = int(os.getenv("PORT", "8080"))
    include_external_places = _env_flag("INCLUDE_EXTERNAL_PLACES", "false")
    show_only_with_incentives = _env_flag("SHOW_ONLY_WITH_INCENTIVES", "true")
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

    if not search_api_url:
        logger.warning("SEARCH_API_URL is not set; business lookups will fail.")
    if not google_api_key:
        logger.warning("GOOGLE_API_KEY is not configured; Google Places requests will fail.")

    return Settings(
        search_api_url=search_api_url,
        google_api_key=google_api_key,
        request_timeout=request_timeout,
        port=port,
        include_external_places=include_external_places,
        show_only_with_incentives=show_only_with_incentives,
        log_level=log_level,
    )


def require_search_api_url(settings: Settings) -> str:
    if not settings.search_api_url:
        raise ConfigError("SEARCH_API_URL must be set in the environment to reach the business directory.")
    return settings.search_api_url
