"""
Domain: results of recording a sale.

`Skipped` and `Recorded` are normal results. `Rejected` means the request
named an unknown partner. `PartialFailure` means the event was authentic but
a downstream write failed; it is still acknowledged to the provider.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .sale import SaleRecord


@dataclass(frozen=True, slots=True)
class Skipped:
    """No correlation identifier on the session."""


@dataclass(frozen=True, slots=True)
class Rejected:
    """Correlation identifier did not resolve to a partner."""

    reason: str


@dataclass(frozen=True, slots=True)
class Recorded:
    """Sale persisted and partner statistics updated."""

    sale: SaleRecord


@dataclass(frozen=True, slots=True)
class PartialFailure:
    """
    Sale insert or statistics update failed after verification.

    `sale` is set when the insert succeeded and only the statistics update
    failed.
    """

    error: Exception
    sale: SaleRecord | None = None

    @property
    def message(self) -> str:
        return str(self.error)


Outcome = Union[Skipped, Rejected, Recorded, PartialFailure]


__all__ = ["Skipped", "Rejected", "Recorded", "PartialFailure", "Outcome"]
