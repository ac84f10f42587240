"""
Domain: verified payment-provider events.

A `VerifiedEvent` only exists after the signature check has passed. The
checkout session fields the relay cares about are pulled out of the event's
`data.object` into an immutable `CheckoutSession`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Union

CHECKOUT_SESSION_COMPLETED: str = "checkout.session.completed"


@dataclass(frozen=True, slots=True)
class VerifiedEvent:
    """
    Stripe event whose signature has been checked.

    `data_object` is the event's `data.object` mapping (for checkout events,
    the session itself).
    """

    event_id: str
    event_type: str
    data_object: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class CheckoutSession:
    """
    Fields of a completed Stripe Checkout Session needed to record a sale.

    amount_total is in minor currency units (cents). Stripe sends null for
    sessions without a charge (setup mode); null, negative or non-integer
    values are all held as None.
    """

    session_id: Optional[str]
    correlation_id: Optional[str]  # client_reference_id, names the partner
    amount_total: Optional[int]
    customer_email: Optional[str]
    subscription_id: Optional[str]
    payment_status: Optional[str]

    @classmethod
    def from_stripe_object(cls, obj: Mapping[str, Any]) -> CheckoutSession:
        """Build a session from a Stripe `checkout.session` object. Never raises."""

        amount = obj.get("amount_total")
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
            amount = None

        details = obj.get("customer_details") or {}

        return cls(
            session_id=obj.get("id"),
            correlation_id=obj.get("client_reference_id") or None,
            amount_total=amount,
            customer_email=details.get("email"),
            subscription_id=obj.get("subscription"),
            payment_status=obj.get("payment_status"),
        )


@dataclass(frozen=True, slots=True)
class ProcessSale:
    """Routing decision: record a sale for this session."""

    session: CheckoutSession


@dataclass(frozen=True, slots=True)
class Ignore:
    """Routing decision: acknowledge the event and do nothing."""

    event_type: str


Action = Union[ProcessSale, Ignore]


__all__ = [
    "CHECKOUT_SESSION_COMPLETED",
    "VerifiedEvent",
    "CheckoutSession",
    "ProcessSale",
    "Ignore",
    "Action",
]
