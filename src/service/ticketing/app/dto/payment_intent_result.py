from decimal import Decimal
from typing import Optional

import attrs


@attrs.define(frozen=True)
class TicketSummary:
    ticket_id: str
    event_id: str
    event_name: str
    listing_price: Decimal
    currency: str


@attrs.define(frozen=True)
class PaymentIntentResult:
    client_secret: str
    transaction_id: str
    payer_reference: str
    ticket_summary: Optional[TicketSummary] = None


@attrs.define(frozen=True)
class PayerAccount:
    payer_reference: str
    existing: bool
