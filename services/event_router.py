"""
Event routing.

Decides what to do with a verified event. Only completed checkout sessions
lead to a sale; everything else is acknowledged and dropped.
"""

from __future__ import annotations

from domain.events import (
    CHECKOUT_SESSION_COMPLETED,
    Action,
    CheckoutSession,
    Ignore,
    ProcessSale,
    VerifiedEvent,
)


def route(event: VerifiedEvent) -> Action:
    """Map a verified event to an action. Pure, no I/O."""

    if event.event_type != CHECKOUT_SESSION_COMPLETED:
        return Ignore(event_type=event.event_type)

    return ProcessSale(session=CheckoutSession.from_stripe_object(event.data_object))


__all__ = ["route"]
