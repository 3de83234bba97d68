"""
Runtime configuration for postrack.

Values come from environment variables (optionally loaded from a .env file).
"""

import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_BASE_URL = "https://api.binderbyte.com"
DEFAULT_COURIER = "pos"
DEFAULT_PREFIX = "P"
DEFAULT_DELAY_SECONDS = 1.0
DEFAULT_TIMEOUT_SECONDS = 30.0


class Settings(BaseModel):
    """Tracking service settings"""

    api_key: str | None = Field(default=None, description="BinderByte API key")
    base_url: str = Field(default=DEFAULT_BASE_URL, description="BinderByte API root")
    courier: str = Field(default=DEFAULT_COURIER, description="Courier code")
    tracking_number_prefix: str = Field(
        default=DEFAULT_PREFIX,
        description="Tracking numbers not starting with this are discarded",
    )
    request_delay_seconds: float = Field(
        default=DEFAULT_DELAY_SECONDS,
        ge=0.0,
        description="Pause between consecutive lookups in a batch",
    )
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS, gt=0.0, description="HTTP request timeout"
    )

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)


def _getenv_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return float(value)


def load_settings() -> Settings:
    """
    Build settings from the environment.

    BINDERBYTE_API_KEY is preferred; NEXT_PUBLIC_BINDERBYTE_API_KEY is
    accepted so an existing dashboard .env file keeps working.
    """
    load_dotenv()

    api_key = os.getenv("BINDERBYTE_API_KEY") or os.getenv(
        "NEXT_PUBLIC_BINDERBYTE_API_KEY"
    )

    return Settings(
        api_key=api_key or None,
        base_url=os.getenv("BINDERBYTE_BASE_URL", DEFAULT_BASE_URL),
        courier=os.getenv("BINDERBYTE_COURIER", DEFAULT_COURIER),
        tracking_number_prefix=os.getenv("TRACKING_NUMBER_PREFIX", DEFAULT_PREFIX),
        request_delay_seconds=_getenv_float(
            "TRACKING_REQUEST_DELAY_SECONDS", DEFAULT_DELAY_SECONDS
        ),
        timeout_seconds=_getenv_float(
            "BINDERBYTE_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS
        ),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, read once."""
    return load_settings()
