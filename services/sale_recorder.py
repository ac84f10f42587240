"""
Sale recorder for completed checkout sessions.

Handles:
- Skipping sessions that carry no partner reference
- Rejecting references to unknown partners
- Inserting the sale, then triggering the partner statistics update

Acknowledgement policy:
Once a webhook has been authenticated, failures of our own downstream writes
are acknowledged to Stripe (HTTP 200 with an error detail) and must not cause
a redelivery. The acknowledgement takes priority over consistency between the
sale table and the partner statistics. Such failures are logged with partner,
amount, email and session for manual reconciliation.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Optional, Protocol

from domain.errors import (
    AggregateUpdateError,
    MalformedEventError,
    PartnerLookupError,
    PersistenceError,
)
from domain.events import CheckoutSession
from domain.outcome import Outcome, PartialFailure, Recorded, Rejected, Skipped
from domain.partner import PartnerRecord
from domain.sale import SaleRecord, to_major_units
from domain.time import utc_now

logger = logging.getLogger(__name__)

PARTNER_NOT_FOUND: str = "partner not found"


class PartnerLookup(Protocol):
    def get_partner_by_id(self, partner_id: str) -> Optional[PartnerRecord]: ...


class SaleStore(Protocol):
    def record_sale(self, sale: SaleRecord) -> SaleRecord: ...


class StatsUpdater(Protocol):
    def update_partner_stats(self, partner_id: str, amount: Decimal) -> Any: ...


class SaleRecorder:
    """
    Records one sale per completed checkout session.

    The repositories and the clock are injected so tests can substitute fakes.
    Steps run strictly in order and nothing is retried here; Stripe's own
    webhook redelivery is the only retry boundary.
    """

    def __init__(
        self,
        partners: PartnerLookup,
        sales: SaleStore,
        stats: StatsUpdater,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._partners = partners
        self._sales = sales
        self._stats = stats
        self._clock = clock

    def record(self, session: CheckoutSession) -> Outcome:
        """
        Record the sale described by a completed checkout session.

        Process:
        1. No correlation identifier -> Skipped
        2. Unknown partner (or lookup failure) -> Rejected
        3. No usable amount_total -> PartialFailure, nothing written
        4. Convert amount to major units, stamp with processing time
        5. Insert sale; failure -> PartialFailure, stats untouched
        6. Update partner stats; failure -> PartialFailure, sale kept
        7. Recorded

        Returns:
            One of Skipped, Rejected, Recorded, PartialFailure
        """

        partner_id = session.correlation_id
        context = {
            "partner_id": partner_id,
            "amount_total": session.amount_total,
            "customer_email": session.customer_email,
            "subscription_id": session.subscription_id,
            "session_id": session.session_id,
        }
        # Log lines must carry the reconciliation fields in the message itself
        details = (
            f"partner={partner_id} amount_total={session.amount_total} "
            f"email={session.customer_email} subscription={session.subscription_id} "
            f"session={session.session_id}"
        )

        logger.info(f"Checkout session completed: {details}", extra=context)

        # 1. Correlation identifier
        if not partner_id:
            logger.info(f"No partner reference on checkout session, skipping: {details}", extra=context)
            return Skipped()

        # 2. Partner must already exist
        try:
            partner = self._partners.get_partner_by_id(partner_id)
        except PartnerLookupError as e:
            logger.error(f"Partner lookup failed ({e}): {details}", extra=context)
            return Rejected(reason=PARTNER_NOT_FOUND)

        if partner is None:
            logger.error(f"Partner not found: {details}", extra=context)
            return Rejected(reason=PARTNER_NOT_FOUND)

        # 3. Amount
        if session.amount_total is None:
            error = MalformedEventError("amount_total is missing or invalid")
            logger.error(f"Cannot record sale, {error}: {details}", extra=context)
            return PartialFailure(error=error)

        # 4. Build the sale
        amount = to_major_units(session.amount_total)
        sale = SaleRecord(
            partner_id=partner.partner_id,
            amount=amount,
            sale_date=self._clock(),
            customer_email=session.customer_email,
            subscription_id=session.subscription_id,
            payment_status=session.payment_status,
        )

        # 5. Persist
        try:
            stored = self._sales.record_sale(sale)
        except PersistenceError as e:
            logger.error(f"Failed to record sale of {amount} ({e}): {details}", extra=context)
            return PartialFailure(error=e)

        logger.info(
            f"Sale {stored.sale_id} recorded, amount {amount}: {details}",
            extra={**context, "sale_id": stored.sale_id},
        )

        # 6. Aggregate statistics
        try:
            stats = self._stats.update_partner_stats(partner.partner_id, amount)
        except AggregateUpdateError as e:
            logger.error(
                f"Sale {stored.sale_id} of {amount} recorded but stats update failed ({e}): {details}",
                extra={**context, "sale_id": stored.sale_id},
            )
            return PartialFailure(error=e, sale=stored)

        logger.info(f"Partner stats updated: {details}", extra={**context, "stats": stats})

        return Recorded(sale=stored)


__all__ = [
    "PARTNER_NOT_FOUND",
    "SaleRecorder",
]
