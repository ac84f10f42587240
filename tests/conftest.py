"""
Pytest configuration and shared fixtures.

This file adds the project root to the Python path so that tests can import
from the api, domain, repositories and services modules, and provides
in-memory stand-ins for the Supabase-backed repositories.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import sys
import time
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

# Add the project root to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from domain.partner import PartnerRecord  # noqa: E402
from domain.sale import SaleRecord  # noqa: E402

WEBHOOK_SECRET = "whsec_test_secret"
FIXED_NOW = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakePartnerRepository:
    """Partners held in memory. Set `fail_with` to make lookups raise."""

    def __init__(self, partner_ids: Tuple[str, ...] = ()) -> None:
        self.partner_ids = set(partner_ids)
        self.calls: List[str] = []
        self.fail_with: Optional[Exception] = None

    def get_partner_by_id(self, partner_id: str) -> Optional[PartnerRecord]:
        self.calls.append(partner_id)
        if self.fail_with is not None:
            raise self.fail_with
        if partner_id not in self.partner_ids:
            return None
        return PartnerRecord(partner_id=partner_id)


class FakeSaleRepository:
    """Sales held in memory, ids assigned on insert."""

    def __init__(self) -> None:
        self.rows: List[SaleRecord] = []
        self.fail_with: Optional[Exception] = None

    def record_sale(self, sale: SaleRecord) -> SaleRecord:
        if self.fail_with is not None:
            raise self.fail_with
        stored = replace(sale, sale_id=f"sale_{len(self.rows) + 1}")
        self.rows.append(stored)
        return stored

    def list_sales_by_partner(self, partner_id: str) -> List[SaleRecord]:
        return [row for row in self.rows if row.partner_id == partner_id]


class FakeStatsRepository:
    """Records every statistics update call."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Decimal]] = []
        self.fail_with: Optional[Exception] = None

    def update_partner_stats(self, partner_id: str, amount: Decimal) -> Any:
        if self.fail_with is not None:
            raise self.fail_with
        self.calls.append((partner_id, amount))
        return None


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """Build a Stripe-Signature header using Stripe's v1 HMAC-SHA256 scheme."""

    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.".encode("utf-8") + payload
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={digest}"


def make_event(
    event_type: str = "checkout.session.completed",
    event_id: str = "evt_test_1",
    **session: Any,
) -> bytes:
    """Serialize a Stripe event whose data.object carries `session` fields."""

    obj: Dict[str, Any] = {"id": "cs_test_1", "object": "checkout.session"}
    obj.update(session)
    event = {"id": event_id, "object": "event", "type": event_type, "data": {"object": obj}}
    return json.dumps(event).encode("utf-8")


@pytest.fixture
def partners() -> FakePartnerRepository:
    return FakePartnerRepository(("aff_1",))


@pytest.fixture
def sales() -> FakeSaleRepository:
    return FakeSaleRepository()


@pytest.fixture
def stats() -> FakeStatsRepository:
    return FakeStatsRepository()


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def recorder(partners, sales, stats, clock):
    from services.sale_recorder import SaleRecorder

    return SaleRecorder(partners=partners, sales=sales, stats=stats, clock=clock)


@pytest.fixture
def api_client(recorder):
    """TestClient with the verifier and recorder factory dependencies replaced."""

    from fastapi.testclient import TestClient

    from api.dependencies import get_sale_recorder_factory, get_signature_verifier
    from api.main import app
    from services.signature_service import SignatureVerifier

    app.dependency_overrides[get_signature_verifier] = lambda: SignatureVerifier(WEBHOOK_SECRET)
    app.dependency_overrides[get_sale_recorder_factory] = lambda: (lambda: recorder)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
