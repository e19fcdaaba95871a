from fastapi import APIRouter, Depends
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.inventory_ledger import InventoryLedger
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.driving_adapter.http_controller.auth.current_user import (
    CurrentUser,
    get_current_user,
)
from src.service.ticketing.driving_adapter.http_controller.schema.ticket_schema import (
    ListTicketRequest,
    TicketResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


def _to_response(ticket: TicketEntity) -> TicketResponse:
    return TicketResponse(
        id=ticket.id,
        event_id=ticket.event_id,
        owner_id=ticket.owner_id,
        state=ticket.state.value,
        currency=ticket.currency,
        listing_price=ticket.listing_price,
        listed_at=ticket.listed_at,
    )


@router.post('/{ticket_id}/listing')
@Logger.io
async def list_ticket_for_resale(
    ticket_id: str,
    request: ListTicketRequest,
    current_user: CurrentUser = Depends(get_current_user),
    inventory_ledger: InventoryLedger = Depends(InventoryLedger.depends),
) -> TicketResponse:
    with tracer.start_as_current_span('controller.list_ticket_for_resale') as span:
        span.set_attribute('ticket_id', ticket_id)
        span.set_attribute('owner_id', current_user.user_id)

        ticket = await inventory_ledger.list_ticket_for_resale(
            ticket_id=ticket_id,
            owner_id=current_user.user_id,
            listing_price=request.listing_price,
        )
        return _to_response(ticket)


@router.delete('/{ticket_id}/listing')
@Logger.io
async def cancel_ticket_listing(
    ticket_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    inventory_ledger: InventoryLedger = Depends(InventoryLedger.depends),
) -> TicketResponse:
    ticket = await inventory_ledger.cancel_listing(
        ticket_id=ticket_id, owner_id=current_user.user_id
    )
    return _to_response(ticket)
