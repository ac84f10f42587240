"""
Domain: affiliate sale records.

Contract excerpts relevant here:
- A sale is recorded only for a partner that already exists.
- A sale is created once per processed checkout event and never updated.
- The sale timestamp is the time the event was processed.
- Amounts are stored in major currency units (minor units / 100), with no
  rounding applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from .time import require_utc_timestamp

_MINOR_UNITS_PER_MAJOR: Decimal = Decimal(100)
_CENTS: Decimal = Decimal("0.01")


def to_major_units(amount_minor: int) -> Decimal:
    """
    Convert an amount in minor units (cents) to major units.

    Dividing an integer by 100 is exact in Decimal, so the result carries two
    decimal places and no rounding takes place.

    Example:
        to_major_units(2500)  # Decimal("25.00")
        to_major_units(1999)  # Decimal("19.99")
    """

    return (Decimal(amount_minor) / _MINOR_UNITS_PER_MAJOR).quantize(_CENTS)


@dataclass(frozen=True, slots=True)
class SaleRecord:
    """
    Immutable record of a sale attributed to a partner.

    partner_id is stored in the `affiliate_id` column.
    """

    partner_id: str
    amount: Decimal
    sale_date: datetime
    customer_email: Optional[str] = None
    subscription_id: Optional[str] = None
    payment_status: Optional[str] = None
    sale_id: Optional[str] = None  # assigned by the data store

    def __post_init__(self) -> None:
        require_utc_timestamp("sale_date", self.sale_date)
        if self.amount < 0:
            raise ValueError("amount must not be negative")
