"""
Stripe webhook signature verification.

Authenticates the raw request body against the `Stripe-Signature` header
using the endpoint's signing secret, then parses the event.

Security:
- The body must be the exact bytes Stripe sent; any re-serialization breaks
  the HMAC.
- Neither the payload nor the signature header is ever logged.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

import stripe

from domain.errors import SignatureError
from domain.events import VerifiedEvent

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE_SECONDS: int = 300


class SignatureVerifier:
    """
    Verifies webhook payloads for one Stripe endpoint.

    The signing secret is bound at construction so the verifier can be built
    once from settings and injected into the endpoint.
    """

    def __init__(self, webhook_secret: str, tolerance: int = DEFAULT_TOLERANCE_SECONDS) -> None:
        if not webhook_secret:
            raise RuntimeError("Webhook signing secret is empty. Set STRIPE_WEBHOOK_SECRET.")
        self._secret = webhook_secret
        self._tolerance = tolerance

    def verify(self, raw_payload: bytes, signature_header: Optional[str]) -> VerifiedEvent:
        """
        Authenticate and parse a webhook payload.

        Args:
            raw_payload: Untouched request body bytes
            signature_header: Value of the Stripe-Signature header

        Returns:
            VerifiedEvent with event id, type and data.object

        Raises:
            SignatureError: on a missing/malformed header, a signature mismatch,
                a timestamp outside the tolerance, or an unparseable payload
        """

        if not signature_header:
            logger.warning("Stripe webhook rejected: missing signature header")
            raise SignatureError("No signatures found matching the expected signature for payload")

        try:
            payload = raw_payload.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.warning("Stripe webhook rejected: payload is not valid UTF-8")
            raise SignatureError("Invalid payload encoding") from e

        try:
            stripe.WebhookSignature.verify_header(
                payload, signature_header, self._secret, self._tolerance
            )
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Stripe webhook signature verification failed: {e.user_message or e}")
            raise SignatureError(str(e.user_message or e)) from e

        try:
            event = json.loads(payload)
        except ValueError as e:
            logger.warning("Stripe webhook rejected: payload is not valid JSON")
            raise SignatureError(f"Invalid payload: {e}") from e

        return _to_verified_event(event)


def _to_verified_event(event: Any) -> VerifiedEvent:
    """Extract id, type and data.object from a parsed Stripe event."""

    if not isinstance(event, Mapping):
        raise SignatureError("Invalid payload: event is not a JSON object")

    event_id = event.get("id")
    event_type = event.get("type")
    if not event_id or not event_type:
        raise SignatureError("Invalid payload: missing event id or type")

    data = event.get("data") or {}
    obj = data.get("object") if isinstance(data, Mapping) else None

    return VerifiedEvent(
        event_id=str(event_id),
        event_type=str(event_type),
        data_object=obj if isinstance(obj, Mapping) else {},
    )


__all__ = ["DEFAULT_TOLERANCE_SECONDS", "SignatureVerifier"]
