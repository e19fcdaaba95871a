from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class ListTicketRequest(BaseModel):
    listing_price: Decimal = Field(gt=0, max_digits=12, decimal_places=2)


class TicketResponse(BaseModel):
    id: str
    event_id: str
    owner_id: str
    state: str
    currency: str
    listing_price: Optional[Decimal] = None
    listed_at: Optional[datetime] = None


class ReconciliationEntryResponse(BaseModel):
    id: str
    payment_id: str
    payment_type: str
    reason: str
    created_at: datetime
