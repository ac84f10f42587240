"""
Domain: partners (affiliates).

A partner is referenced by the checkout session's client_reference_id. The
relay only checks that the partner exists; it never creates or edits one.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class PartnerRecord:
    """Existing partner eligible for commission tracking."""

    partner_id: str
