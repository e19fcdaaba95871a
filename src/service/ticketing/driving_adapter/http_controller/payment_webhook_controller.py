"""
Gateway notification receiver

200 is returned only once the settlement transaction committed (or the
paid-but-unfulfilled case was persisted); anything else makes the gateway
redeliver, which settlement absorbs idempotently. A notification that
outruns its payment record is answered 503 for the same reason.
"""

from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Header, Request
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.settlement_processor import SettlementProcessor
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.driving_adapter.http_controller.schema.payment_schema import (
    WebhookResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('/webhook')
@Logger.io
@inject
async def receive_payment_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(default=None, alias='stripe-signature'),
    payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
    settlement_processor: SettlementProcessor = Depends(SettlementProcessor.depends),
) -> WebhookResponse:
    with tracer.start_as_current_span('controller.receive_payment_webhook') as span:
        # Signature covers the exact bytes received
        payload = await request.body()
        notification = payment_gateway.construct_notification(
            payload=payload, signature=stripe_signature or ''
        )
        span.set_attribute('notification.type', type(notification).__name__)
        span.set_attribute('notification.id', notification.notification_id)

        outcome = await settlement_processor.process(notification)

        span.set_attribute('settlement.outcome', outcome.value)
        return WebhookResponse(outcome=outcome.value)
