"""
Supabase client construction.

This module contains *only* the database connection setup. Nothing is created
at import time: the API layer builds one client per process from its settings
and hands it to the repositories, and tests hand them fakes instead.
"""

from __future__ import annotations

# The dependency is `supabase` (supabase-py). If your editor can't resolve it,
# install it in your environment: `pip install supabase`.
from supabase import Client, create_client  # type: ignore[import-not-found]


def create_supabase_client(url: str, service_key: str) -> Client:
    """
    Create the Supabase client used by every repository.

    Args:
        url: Supabase project URL
        service_key: service-role key (server side only, bypasses row level security)

    Raises:
        RuntimeError: if either value is empty
    """

    if not url:
        raise RuntimeError("Supabase URL is empty. Set SUPABASE_URL to your Supabase project URL.")
    if not service_key:
        raise RuntimeError("Supabase key is empty. Set SUPABASE_SERVICE_KEY to your service-role key.")

    return create_client(url, service_key)


__all__ = ["Client", "create_supabase_client"]
