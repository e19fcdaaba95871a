"""Availability snapshot returned by the inventory ledger check."""

from decimal import Decimal
from typing import Optional

import attrs


@attrs.define(frozen=True)
class LedgerSnapshot:
    """
    Counters as read at check time. Nothing is held: the same predicate is
    re-evaluated when the payment settles.
    """

    event_id: str
    event_name: str
    currency: str
    quantity: int
    tickets_remaining: int
    tier_id: Optional[str] = None
    tier_remaining: Optional[int] = None
    unit_price: Optional[Decimal] = None
