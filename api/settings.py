"""
Process configuration.

Values are read from the environment. A `.env` file in the project root is
loaded at import time, so local development only needs that file.

Environment variables required (checked when first needed: the Stripe secret
on the first webhook, the Supabase values on the first checkout to record):
- STRIPE_WEBHOOK_SECRET: Signing secret of the Stripe webhook endpoint
- SUPABASE_URL: Your Supabase project URL
- SUPABASE_SERVICE_KEY: Supabase service-role key (server side only)

Optional (read at startup):
- ALLOWED_ORIGINS: Comma-separated CORS origins
- STRIPE_SIGNATURE_TOLERANCE: Max signature age in seconds (default 300)
- PORT: Listen port (default 3000)
- LOG_LEVEL: Logging level name (default INFO)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv

# Load environment variables from .env file
# Look for .env in the project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DEFAULT_ALLOWED_ORIGINS: Tuple[str, ...] = ("https://lab.va360.pro",)


@dataclass(frozen=True, slots=True)
class StripeSettings:
    """What the signature check needs."""

    webhook_secret: str
    signature_tolerance: int = 300


@dataclass(frozen=True, slots=True)
class SupabaseSettings:
    """What the repositories need."""

    url: str
    service_key: str


def _require(name: str, description: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing environment variable: {name}. Set {name} to {description}.")
    return value


def parse_origins(raw: str | None) -> Tuple[str, ...]:
    """Split a comma-separated origin list, falling back to the default."""

    if not raw:
        return DEFAULT_ALLOWED_ORIGINS
    origins = tuple(origin.strip() for origin in raw.split(",") if origin.strip())
    return origins or DEFAULT_ALLOWED_ORIGINS


def get_allowed_origins() -> Tuple[str, ...]:
    return parse_origins(os.getenv("ALLOWED_ORIGINS"))


def get_port() -> int:
    return int(os.getenv("PORT", "3000"))


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def load_stripe_settings() -> StripeSettings:
    """
    Build StripeSettings from the environment.

    Raises:
        RuntimeError: if STRIPE_WEBHOOK_SECRET is missing
    """

    return StripeSettings(
        webhook_secret=_require("STRIPE_WEBHOOK_SECRET", "the Stripe endpoint signing secret"),
        signature_tolerance=int(os.getenv("STRIPE_SIGNATURE_TOLERANCE", "300")),
    )


def load_supabase_settings() -> SupabaseSettings:
    """
    Build SupabaseSettings from the environment.

    Raises:
        RuntimeError: if SUPABASE_URL or SUPABASE_SERVICE_KEY is missing
    """

    return SupabaseSettings(
        url=_require("SUPABASE_URL", "your Supabase project URL"),
        service_key=_require("SUPABASE_SERVICE_KEY", "your Supabase service-role key"),
    )


@lru_cache(maxsize=1)
def get_stripe_settings() -> StripeSettings:
    """Stripe settings for this process, loaded once."""
    return load_stripe_settings()


@lru_cache(maxsize=1)
def get_supabase_settings() -> SupabaseSettings:
    """Supabase settings for this process, loaded once."""
    return load_supabase_settings()


__all__ = [
    "DEFAULT_ALLOWED_ORIGINS",
    "StripeSettings",
    "SupabaseSettings",
    "parse_origins",
    "get_allowed_origins",
    "get_port",
    "get_log_level",
    "load_stripe_settings",
    "load_supabase_settings",
    "get_stripe_settings",
    "get_supabase_settings",
]
