"""
End-to-end tests for `POST /webhook`.

The signature verifier runs for real against a test secret; the repositories
are in-memory fakes injected through FastAPI dependency overrides.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from conftest import WEBHOOK_SECRET, make_event, sign_payload
from domain.errors import AggregateUpdateError, PartnerLookupError, PersistenceError


def _post(api_client, payload: bytes, header: str | None = "sign"):
    headers = {"Content-Type": "application/json"}
    if header == "sign":
        headers["Stripe-Signature"] = sign_payload(payload)
    elif header is not None:
        headers["Stripe-Signature"] = header
    return api_client.post("/webhook", content=payload, headers=headers)


def _completed(**overrides) -> bytes:
    session = {
        "client_reference_id": "aff_1",
        "amount_total": 2500,
        "customer_details": {"email": "a@b.com"},
        "subscription": "sub_9",
        "payment_status": "paid",
    }
    session.update(overrides)
    return make_event(**session)


def _no_store_calls(partners, sales, stats) -> bool:
    return partners.calls == [] and sales.rows == [] and stats.calls == []


@pytest.mark.parametrize("header", [None, "t=1,v1=deadbeef", "garbage"])
def test_invalid_signature_is_rejected(api_client, partners, sales, stats, header) -> None:
    response = _post(api_client, _completed(), header=header)

    assert response.status_code == 400
    assert response.text.startswith("Webhook Error:")
    assert _no_store_calls(partners, sales, stats)


def test_signature_for_other_secret_is_rejected(api_client, partners, sales, stats) -> None:
    payload = _completed()

    response = _post(api_client, payload, header=sign_payload(payload, secret="whsec_other"))

    assert response.status_code == 400
    assert _no_store_calls(partners, sales, stats)


@pytest.mark.parametrize("event_type", ["payment_intent.succeeded", "invoice.paid"])
def test_other_event_types_are_acknowledged(api_client, partners, sales, stats, event_type) -> None:
    response = _post(api_client, make_event(event_type=event_type, client_reference_id="aff_1"))

    assert response.status_code == 200
    assert response.json() == {"received": True}
    assert _no_store_calls(partners, sales, stats)


def test_missing_correlation_id_is_not_processed(api_client, partners, sales, stats) -> None:
    response = _post(api_client, _completed(client_reference_id=None))

    assert response.status_code == 200
    assert response.json() == {"received": True, "processed": False}
    assert _no_store_calls(partners, sales, stats)


def test_unknown_partner_is_rejected(api_client, sales, stats) -> None:
    response = _post(api_client, _completed(client_reference_id="aff_unknown"))

    assert response.status_code == 400
    assert response.json() == {"error": "partner not found"}
    assert sales.rows == []
    assert stats.calls == []


def test_completed_checkout_records_sale(api_client, sales, stats) -> None:
    response = _post(api_client, _completed())

    assert response.status_code == 200
    assert response.json() == {"received": True, "processed": True}
    assert len(sales.rows) == 1
    sale = sales.rows[0]
    assert sale.partner_id == "aff_1"
    assert sale.amount == Decimal("25.00")
    assert sale.customer_email == "a@b.com"
    assert sale.subscription_id == "sub_9"
    assert sale.payment_status == "paid"
    assert stats.calls == [("aff_1", Decimal("25.00"))]


def test_stats_failure_is_acknowledged_and_sale_kept(api_client, sales, stats) -> None:
    stats.fail_with = AggregateUpdateError("Failed to update partner stats: timeout")

    response = _post(api_client, _completed())

    assert response.status_code == 200
    assert response.json() == {"received": True, "error": "Failed to update partner stats: timeout"}
    assert len(sales.list_sales_by_partner("aff_1")) == 1


def test_insert_failure_is_acknowledged(api_client, sales, stats) -> None:
    sales.fail_with = PersistenceError("Failed to record sale: connection reset")

    response = _post(api_client, _completed())

    assert response.status_code == 200
    assert response.json() == {"received": True, "error": "Failed to record sale: connection reset"}
    assert stats.calls == []


def test_unexpected_error_is_acknowledged(api_client, sales) -> None:
    sales.fail_with = KeyError("affiliate_id")

    response = _post(api_client, _completed())

    assert response.status_code == 200
    body = response.json()
    assert body["received"] is True
    assert "affiliate_id" in body["error"]


def test_null_amount_without_reference_is_not_processed(api_client, partners, sales, stats) -> None:
    response = _post(api_client, _completed(client_reference_id=None, amount_total=None))

    assert response.status_code == 200
    assert response.json() == {"received": True, "processed": False}
    assert _no_store_calls(partners, sales, stats)


def test_null_amount_for_known_partner_is_acknowledged(api_client, sales, stats) -> None:
    response = _post(api_client, _completed(amount_total=None))

    assert response.status_code == 200
    body = response.json()
    assert body["received"] is True
    assert "amount_total" in body["error"]
    assert sales.rows == []
    assert stats.calls == []


def test_partner_lookup_failure_is_rejected(api_client, partners, sales) -> None:
    partners.fail_with = PartnerLookupError("Failed to fetch partner aff_1: connection refused")

    response = _post(api_client, _completed())

    assert response.status_code == 400
    assert response.json() == {"error": "partner not found"}
    assert sales.rows == []


def test_missing_database_settings_only_affect_checkout_events(monkeypatch) -> None:
    from fastapi.testclient import TestClient

    from api.dependencies import get_signature_verifier
    from api.main import app
    from api.settings import get_supabase_settings
    from services.signature_service import SignatureVerifier

    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_SERVICE_KEY", raising=False)
    get_supabase_settings.cache_clear()
    app.dependency_overrides[get_signature_verifier] = lambda: SignatureVerifier(WEBHOOK_SECRET)
    try:
        client = TestClient(app)

        unsigned = _post(client, _completed(), header=None)
        assert unsigned.status_code == 400

        ignored = _post(client, make_event(event_type="invoice.paid"))
        assert ignored.status_code == 200
        assert ignored.json() == {"received": True}

        checkout = _post(client, _completed())
        assert checkout.status_code == 200
        assert checkout.json()["received"] is True
        assert "SUPABASE_URL" in checkout.json()["error"]
    finally:
        app.dependency_overrides.clear()
        get_supabase_settings.cache_clear()


def test_root_and_health(api_client) -> None:
    assert api_client.get("/").json()["status"] == "API is running"

    health = api_client.get("/health").json()
    assert health["status"] == "healthy"
    assert health["service"] == "affiliate-webhook-relay"
