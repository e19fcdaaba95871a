from datetime import datetime
from decimal import Decimal

import attrs


@attrs.define(frozen=True)
class ReservationResult:
    ticket_id: str
    seller_id: str
    event_id: str
    listing_price: Decimal  # major units
    currency: str
    reserved_until: datetime
