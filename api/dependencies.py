"""
FastAPI dependency providers.

Clients and services are built from Settings and injected into the
endpoints. Tests replace them through `app.dependency_overrides`.

The sale recorder is handed out as a factory: the Supabase settings are only
read once a verified checkout event actually needs the database.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Callable

from fastapi import Depends

from api.settings import StripeSettings, get_stripe_settings, get_supabase_settings
from repositories.client import Client, create_supabase_client
from repositories.partner_repository import PartnerRepository
from repositories.sale_repository import SaleRepository
from repositories.stats_repository import StatsRepository
from services.sale_recorder import SaleRecorder
from services.signature_service import SignatureVerifier


@lru_cache(maxsize=1)
def _supabase_for(url: str, service_key: str) -> Client:
    return create_supabase_client(url, service_key)


def build_sale_recorder() -> SaleRecorder:
    """
    Build a SaleRecorder backed by Supabase.

    Raises:
        RuntimeError: if the Supabase settings are missing
    """

    settings = get_supabase_settings()
    client = _supabase_for(settings.url, settings.service_key)
    return SaleRecorder(
        partners=PartnerRepository(client),
        sales=SaleRepository(client),
        stats=StatsRepository(client),
    )


def get_signature_verifier(settings: StripeSettings = Depends(get_stripe_settings)) -> SignatureVerifier:
    return SignatureVerifier(settings.webhook_secret, tolerance=settings.signature_tolerance)


def get_sale_recorder_factory() -> Callable[[], SaleRecorder]:
    return build_sale_recorder


__all__ = ["build_sale_recorder", "get_signature_verifier", "get_sale_recorder_factory"]
