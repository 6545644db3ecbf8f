"""Application configuration helpers.

Credentials are read from the environment only: both the places directory key
and the database URL are billable or privileged and must never be hardcoded.
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, List, TypeVar

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConfigError(RuntimeError):
    """Raised when mandatory configuration is missing or malformed."""


@dataclass(frozen=True)
class Settings:
    google_api_key: str
    database_url: str
    grid_density: int = 4
    grid_radius_m: int = 4000
    request_delay: float = 0.1
    query_delay: float = 0.3
    page_token_delay: float = 2.0
    http_timeout: float = 10.0
    log_level: str = "INFO"


def _get_env(name: str, default: str, cast: Callable[[str], T]) -> T:
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be a valid {cast.__name__}, got {raw!r}") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    google_api_key = os.getenv("GOOGLE_API_KEY", "")
    database_url = os.getenv("DATABASE_URL", "")
    grid_density = _get_env("HYDRATE_GRID_DENSITY", "4", int)
    if grid_density < 0:
        raise ConfigError("HYDRATE_GRID_DENSITY must not be negative")

    if not database_url:
        logger.warning("DATABASE_URL is not set; database operations will fail.")
    if not google_api_key:
        logger.warning("GOOGLE_API_KEY is not configured; Google Places requests will fail.")

    return Settings(
        google_api_key=google_api_key,
        database_url=database_url,
        grid_density=grid_density,
        grid_radius_m=_get_env("HYDRATE_GRID_RADIUS_M", "4000", int),
        request_delay=_get_env("HYDRATE_REQUEST_DELAY", "0.1", float),
        query_delay=_get_env("HYDRATE_QUERY_DELAY", "0.3", float),
        page_token_delay=_get_env("HYDRATE_PAGE_TOKEN_DELAY", "2.0", float),
        http_timeout=_get_env("HYDRATE_HTTP_TIMEOUT", "10", float),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


def require_credentials(settings: Settings) -> None:
    """Fail fast before any paid call when credentials are absent."""
    missing: List[str] = []
    if not settings.google_api_key:
        missing.append("GOOGLE_API_KEY")
    if not settings.database_url:
        missing.append("DATABASE_URL")
    if missing:
        raise ConfigError(f"{', '.join(missing)} must be set in the environment to run hydration.")
