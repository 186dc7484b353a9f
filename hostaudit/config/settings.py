"""Centralized configuration loading."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class Config:
    """Application configuration.

    Every credential is optional: a source without credentials is simply
    reported as unavailable for the run.
    """

    # API Keys
    pagespeed_api_key: str | None
    dataforseo_login: str | None
    dataforseo_password: str | None
    semrush_api_key: str | None

    # Timeouts (seconds)
    page_fetch_timeout: float
    pagespeed_timeout: float
    dataforseo_timeout: float
    semrush_timeout: float

    # Job limits
    max_jobs_per_ip: int

    @property
    def has_dataforseo_credentials(self) -> bool:
        return bool(self.dataforseo_login and self.dataforseo_password)


def _get_secret_env(key: str) -> str | None:
    """Get an optional secret, treating blank values as unset."""
    value = os.getenv(key)
    if not value or not value.strip():
        return None
    return value.strip()


def _get_optional_env(key: str, default: str) -> str:
    """Get optional environment variable with default."""
    value = os.getenv(key)
    return value.strip() if value else default


def load_config() -> Config:
    """Load configuration from environment (and a local .env file)."""
    load_dotenv()

    return Config(
        pagespeed_api_key=_get_secret_env("PAGESPEED_API_KEY"),
        dataforseo_login=_get_secret_env("DATAFORSEO_LOGIN"),
        dataforseo_password=_get_secret_env("DATAFORSEO_PASSWORD"),
        semrush_api_key=_get_secret_env("SEMRUSH_API_KEY"),
        page_fetch_timeout=float(_get_optional_env("PAGE_FETCH_TIMEOUT", "30")),
        pagespeed_timeout=float(_get_optional_env("PAGESPEED_TIMEOUT", "60")),
        dataforseo_timeout=float(_get_optional_env("DATAFORSEO_TIMEOUT", "30")),
        semrush_timeout=float(_get_optional_env("SEMRUSH_TIMEOUT", "15")),
        max_jobs_per_ip=int(_get_optional_env("MAX_JOBS_PER_IP", "5")),
    )


# Singleton config instance (lazy loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the configuration singleton."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset config singleton (useful for testing)."""
    global _config
    _config = None
