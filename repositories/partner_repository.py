"""
Partner repository (read-only).

Looks up partners in the `affiliates` table. The relay never writes to this
table.
"""

from __future__ import annotations

from typing import Optional

import httpx
from postgrest.exceptions import APIError

from domain.errors import PartnerLookupError
from domain.partner import PartnerRecord
from repositories.client import Client

# Supabase table name for partners.
# Keep this aligned with your database schema.
_PARTNERS_TABLE: str = "affiliates"


class PartnerRepository:
    """Partner lookups against Supabase."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def get_partner_by_id(self, partner_id: str) -> Optional[PartnerRecord]:
        """
        Get a partner by its identifier.

        Returns:
            PartnerRecord or None if not found

        Raises:
            PartnerLookupError: if the query itself fails
        """

        try:
            response = (
                self._client.table(_PARTNERS_TABLE)
                .select("id")
                .eq("id", partner_id)
                .limit(1)
                .execute()
            )
        except (APIError, httpx.HTTPError) as e:
            raise PartnerLookupError(f"Failed to fetch partner {partner_id}: {e}") from e

        error = getattr(response, "error", None)
        if error:
            raise PartnerLookupError(f"Failed to fetch partner {partner_id}: {error}")

        rows = getattr(response, "data", None) or []

        if not rows:
            return None

        return PartnerRecord(partner_id=str(rows[0]["id"]))


__all__ = ["PartnerRepository"]
