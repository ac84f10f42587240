"""
Sale repository (persistence).

This module provides *only* persistence operations for the SaleRecord domain
entity. It does not check that the partner exists and it does not enforce any
uniqueness; it only inserts and fetches sale records.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Mapping

import httpx
from postgrest.exceptions import APIError

from domain.errors import PersistenceError
from domain.sale import SaleRecord
from domain.time import require_utc_timestamp
from repositories.client import Client

# Supabase table name for sale records.
# Keep this aligned with your database schema.
_SALES_TABLE: str = "affiliate_sales"


def _to_iso_utc(dt: datetime, *, name: str) -> str:
    """Serialize a UTC datetime to ISO-8601 (timezone-aware, offset 0)."""

    require_utc_timestamp(name, dt)
    return dt.astimezone(timezone.utc).isoformat()


def _parse_utc_datetime(value: Any) -> datetime:
    """
    Parse a Supabase timestamp into a timezone-aware UTC datetime.

    Supabase commonly returns ISO-8601 strings, sometimes with a trailing 'Z'.
    """

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value)!r}")

    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _row_to_sale(row: Mapping[str, Any]) -> SaleRecord:
    """Convert a Supabase row into a SaleRecord."""

    return SaleRecord(
        sale_id=str(row["id"]) if row.get("id") is not None else None,
        partner_id=str(row["affiliate_id"]),
        amount=Decimal(str(row["amount"])),
        sale_date=_parse_utc_datetime(row["sale_date"]),
        customer_email=row.get("customer_email"),
        subscription_id=row.get("subscription_id"),
        payment_status=row.get("payment_status"),
    )


class SaleRepository:
    """Sale record persistence against Supabase."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def record_sale(self, sale: SaleRecord) -> SaleRecord:
        """
        Insert a new sale record.

        Returns:
            The stored SaleRecord, including the id assigned by the database
            when the insert returns the row.

        Raises:
            PersistenceError: if the insert fails
        """

        payload: dict[str, Any] = {
            "affiliate_id": sale.partner_id,
            "amount": str(sale.amount),
            "customer_email": sale.customer_email,
            "sale_date": _to_iso_utc(sale.sale_date, name="sale_date"),
            "subscription_id": sale.subscription_id,
            "payment_status": sale.payment_status,
        }

        try:
            response = self._client.table(_SALES_TABLE).insert(payload).execute()
        except (APIError, httpx.HTTPError) as e:
            raise PersistenceError(f"Failed to record sale: {e}") from e

        error = getattr(response, "error", None)
        if error:
            raise PersistenceError(f"Failed to record sale: {error}")

        rows = getattr(response, "data", None) or []
        if rows:
            return _row_to_sale(rows[0])
        return sale

    def list_sales_by_partner(self, partner_id: str) -> List[SaleRecord]:
        """
        Retrieve all sale records attributed to a partner.

        Used for manual reconciliation after a partial failure.

        Returns:
            List[SaleRecord] (possibly empty)
        """

        try:
            response = (
                self._client.table(_SALES_TABLE)
                .select("*")
                .eq("affiliate_id", partner_id)
                .execute()
            )
        except (APIError, httpx.HTTPError) as e:
            raise PersistenceError(f"Failed to list sales: {e}") from e

        error = getattr(response, "error", None)
        if error:
            raise PersistenceError(f"Failed to list sales: {error}")

        rows = getattr(response, "data", None) or []
        return [_row_to_sale(row) for row in rows]


__all__ = ["SaleRepository"]
