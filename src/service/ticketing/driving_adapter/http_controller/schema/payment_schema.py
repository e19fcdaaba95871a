from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class PrimaryPaymentIntentRequest(BaseModel):
    event_id: str = Field(min_length=1)
    tier_id: Optional[str] = None
    quantity: int = 1
    amount: int  # minor units
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    description: Optional[str] = None

    model_config = {
        'json_schema_extra': {
            'example': {
                'event_id': '0192f6a0-4c1e-7d3a-9b7e-2f1c3d4e5f60',
                'tier_id': 'General',
                'quantity': 2,
                'amount': 5000,
                'currency': 'chf',
            }
        },
    }


class MarketplacePaymentIntentRequest(BaseModel):
    ticket_id: str = Field(min_length=1)
    description: Optional[str] = None


class PayerAccountRequest(BaseModel):
    email: Optional[str] = None
    display_name: Optional[str] = None


class TicketSummaryResponse(BaseModel):
    ticket_id: str
    event_id: str
    event_name: str
    listing_price: Decimal
    currency: str


class PaymentIntentResponse(BaseModel):
    client_secret: str
    transaction_id: str
    payer_reference: str
    ticket_summary: Optional[TicketSummaryResponse] = None


class PayerAccountResponse(BaseModel):
    payer_reference: str
    existing: bool


class SuccessResponse(BaseModel):
    success: bool = True


class WebhookResponse(BaseModel):
    received: bool = True
    outcome: str
