"""
Domain: webhook processing errors.

Every failure the relay can hit maps to one of these classes, and each class
maps to exactly one HTTP response in `api/routers/webhooks.py`.
"""

from __future__ import annotations


class WebhookError(Exception):
    """Base class for all webhook processing failures."""


class SignatureError(WebhookError):
    """The payload could not be authenticated. Fatal to the request (400)."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class MalformedEventError(WebhookError):
    """A verified checkout carries no usable amount (acknowledged with an error)."""


class PartnerLookupError(WebhookError):
    """The partner table could not be queried (surfaced as partner not found)."""


class PersistenceError(WebhookError):
    """Inserting or reading sale records failed."""


class AggregateUpdateError(WebhookError):
    """The partner statistics procedure failed."""


__all__ = [
    "WebhookError",
    "SignatureError",
    "MalformedEventError",
    "PartnerLookupError",
    "PersistenceError",
    "AggregateUpdateError",
]
