"""
Partner statistics repository.

The statistics themselves are computed by the `update_affiliate_stats`
database function; this module only invokes it.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import httpx
from postgrest.exceptions import APIError

from domain.errors import AggregateUpdateError
from repositories.client import Client

_UPDATE_STATS_FUNCTION: str = "update_affiliate_stats"


class StatsRepository:
    """Triggers the partner statistics procedure in Supabase."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def update_partner_stats(self, partner_id: str, amount: Decimal) -> Any:
        """
        Add one sale of `amount` (major units) to the partner's statistics.

        Returns:
            Whatever the database function returns (unused by the relay)

        Raises:
            AggregateUpdateError: if the RPC fails
        """

        try:
            response = self._client.rpc(
                _UPDATE_STATS_FUNCTION,
                {
                    "p_affiliate_id": partner_id,
                    "p_amount": float(amount),
                },
            ).execute()
        except (APIError, httpx.HTTPError) as e:
            raise AggregateUpdateError(f"Failed to update partner stats: {e}") from e

        error = getattr(response, "error", None)
        if error:
            raise AggregateUpdateError(f"Failed to update partner stats: {error}")

        return getattr(response, "data", None)


__all__ = ["StatsRepository"]
