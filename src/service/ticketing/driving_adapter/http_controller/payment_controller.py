import attrs
from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.payment_intent_orchestrator import (
    PaymentIntentOrchestrator,
)
from src.service.ticketing.app.command.reservation_manager import ReservationManager
from src.service.ticketing.app.dto.payment_intent_result import PaymentIntentResult
from src.service.ticketing.driving_adapter.http_controller.auth.current_user import (
    CurrentUser,
    get_current_user,
)
from src.service.ticketing.driving_adapter.http_controller.schema.payment_schema import (
    MarketplacePaymentIntentRequest,
    PayerAccountRequest,
    PayerAccountResponse,
    PaymentIntentResponse,
    PrimaryPaymentIntentRequest,
    SuccessResponse,
    TicketSummaryResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


def _to_response(result: PaymentIntentResult) -> PaymentIntentResponse:
    return PaymentIntentResponse(
        client_secret=result.client_secret,
        transaction_id=result.transaction_id,
        payer_reference=result.payer_reference,
        ticket_summary=(
            TicketSummaryResponse(**attrs.asdict(result.ticket_summary))
            if result.ticket_summary
            else None
        ),
    )


@router.post('/primary', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_primary_payment_intent(
    request: PrimaryPaymentIntentRequest,
    current_user: CurrentUser = Depends(get_current_user),
    orchestrator: PaymentIntentOrchestrator = Depends(PaymentIntentOrchestrator.depends),
) -> PaymentIntentResponse:
    with tracer.start_as_current_span('controller.create_primary_payment_intent') as span:
        span.set_attribute('event_id', request.event_id)
        span.set_attribute('quantity', request.quantity)
        span.set_attribute('buyer_id', current_user.user_id)

        result = await orchestrator.create_primary_intent(
            buyer_id=current_user.user_id,
            event_id=request.event_id,
            tier_id=request.tier_id,
            quantity=request.quantity,
            amount=request.amount,
            currency=request.currency,
            description=request.description,
            email=current_user.email,
            display_name=current_user.name,
        )

        span.set_attribute('transaction_id', result.transaction_id)
        return _to_response(result)


@router.post('/marketplace', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_marketplace_payment_intent(
    request: MarketplacePaymentIntentRequest,
    current_user: CurrentUser = Depends(get_current_user),
    orchestrator: PaymentIntentOrchestrator = Depends(PaymentIntentOrchestrator.depends),
) -> PaymentIntentResponse:
    with tracer.start_as_current_span('controller.create_marketplace_payment_intent') as span:
        span.set_attribute('ticket_id', request.ticket_id)
        span.set_attribute('buyer_id', current_user.user_id)

        result = await orchestrator.create_marketplace_intent(
            buyer_id=current_user.user_id,
            ticket_id=request.ticket_id,
            description=request.description,
            email=current_user.email,
            display_name=current_user.name,
        )

        span.set_attribute('transaction_id', result.transaction_id)
        return _to_response(result)


@router.delete('/marketplace/{ticket_id}/reservation')
@Logger.io
async def cancel_marketplace_reservation(
    ticket_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    reservation_manager: ReservationManager = Depends(ReservationManager.depends),
) -> SuccessResponse:
    with tracer.start_as_current_span('controller.cancel_marketplace_reservation') as span:
        span.set_attribute('ticket_id', ticket_id)
        span.set_attribute('buyer_id', current_user.user_id)

        await reservation_manager.cancel_reservation(
            ticket_id=ticket_id, buyer_id=current_user.user_id
        )
        return SuccessResponse()


@router.post('/payer_account')
@Logger.io
async def create_payer_account(
    request: PayerAccountRequest,
    current_user: CurrentUser = Depends(get_current_user),
    orchestrator: PaymentIntentOrchestrator = Depends(PaymentIntentOrchestrator.depends),
) -> PayerAccountResponse:
    payer = await orchestrator.ensure_payer_account(
        user_id=current_user.user_id,
        email=request.email or current_user.email,
        display_name=request.display_name or current_user.name,
    )
    return PayerAccountResponse(payer_reference=payer.payer_reference, existing=payer.existing)
