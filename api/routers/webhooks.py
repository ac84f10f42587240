"""
Stripe Webhook Endpoint.

Receives Stripe events, verifies them and records affiliate sales.
"""

import logging
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Header, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from api.dependencies import get_sale_recorder_factory, get_signature_verifier
from api.models import ErrorResponse, WebhookAck
from domain.errors import SignatureError
from domain.events import Ignore
from domain.outcome import Outcome, PartialFailure, Recorded, Rejected, Skipped
from services.event_router import route
from services.sale_recorder import SaleRecorder
from services.signature_service import SignatureVerifier

logger = logging.getLogger(__name__)

router = APIRouter()


def _ack(body: WebhookAck) -> JSONResponse:
    return JSONResponse(content=body.model_dump(exclude_none=True), status_code=200)


def _error(message: str) -> JSONResponse:
    return JSONResponse(content=ErrorResponse(error=message).model_dump(), status_code=400)


def _respond(outcome: Outcome) -> Response:
    """Map a recorder outcome to its HTTP response."""

    if isinstance(outcome, Skipped):
        return _ack(WebhookAck(processed=False))
    if isinstance(outcome, Rejected):
        return _error(outcome.reason)
    if isinstance(outcome, Recorded):
        return _ack(WebhookAck(processed=True))
    if isinstance(outcome, PartialFailure):
        # Downstream failures are acknowledged so Stripe does not redeliver
        return _ack(WebhookAck(error=outcome.message))
    raise TypeError(f"Unknown outcome: {outcome!r}")


@router.post(
    "/webhook",
    summary="Stripe Webhook",
    description="Verify a Stripe event and record the affiliate sale for completed checkouts.",
    responses={
        200: {"model": WebhookAck},
        400: {"model": ErrorResponse},
    },
)
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(default=None),
    verifier: SignatureVerifier = Depends(get_signature_verifier),
    recorder_factory: Callable[[], SaleRecorder] = Depends(get_sale_recorder_factory),
):
    """
    Receive a Stripe webhook event.

    **Process:**
    1. Verifies the `Stripe-Signature` header against the raw body
    2. Ignores every event type except `checkout.session.completed`
    3. Records the sale for the partner named by `client_reference_id`
    4. Triggers the partner statistics update

    **Responses:**
    - `400` plain text `Webhook Error: ...` when the signature is invalid
    - `400` `{"error": "partner not found"}` for an unknown partner
    - `200` `{"received": true, "processed": false}` when no partner is referenced
    - `200` `{"received": true, "processed": true}` when the sale was recorded
    - `200` `{"received": true, "error": "..."}` when a database write failed
    - `200` `{"received": true}` for any other event type
    """
    payload = await request.body()

    try:
        event = verifier.verify(payload, stripe_signature)
    except SignatureError as e:
        logger.error(f"Webhook signature error: {e.reason}")
        return PlainTextResponse(f"Webhook Error: {e.reason}", status_code=400)

    action = route(event)

    if isinstance(action, Ignore):
        logger.info(f"Unhandled event type: {action.event_type}", extra={"event_id": event.event_id})
        return _ack(WebhookAck())

    # Repository calls block, keep them off the event loop.
    # The recorder is built only here, so missing database settings never
    # affect unsigned or ignored events.
    try:
        recorder = recorder_factory()
        outcome = await run_in_threadpool(recorder.record, action.session)
    except Exception as e:
        logger.exception(
            f"Unexpected error processing event {event.event_id}",
            extra={"event_id": event.event_id, "partner_id": action.session.correlation_id},
        )
        outcome = PartialFailure(error=e)

    return _respond(outcome)
