from typing import List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.clock.utc_clock import as_utc
from src.platform.exception.exceptions import ConcurrentModificationError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.ticket_state import TicketState
from src.service.ticketing.driven_adapter.model.ticket_model import TicketModel


class TicketCommandRepoImpl(ITicketCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_entity(model: TicketModel) -> TicketEntity:
        return TicketEntity(
            id=model.id,
            event_id=model.event_id,
            owner_id=model.owner_id,
            purchase_price=model.purchase_price,
            state=TicketState(model.state),
            tier_id=model.tier_id,
            currency=model.currency,
            issued_at=as_utc(model.issued_at),
            expires_at=as_utc(model.expires_at),
            transfer_lock=model.transfer_lock,
            listing_price=model.listing_price,
            listed_at=as_utc(model.listed_at),
            reserved_by=model.reserved_by,
            reserved_until=as_utc(model.reserved_until),
            previous_owner_id=model.previous_owner_id,
            transfer_price=model.transfer_price,
            version=model.version,
            updated_at=as_utc(model.updated_at),
        )

    @Logger.io
    async def get_by_id(self, *, ticket_id: str) -> TicketEntity | None:
        result = await self.session.execute(select(TicketModel).where(TicketModel.id == ticket_id))
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    @Logger.io
    async def create_many(self, *, tickets: List[TicketEntity]) -> List[TicketEntity]:
        self.session.add_all(
            TicketModel(
                id=ticket.id,
                event_id=ticket.event_id,
                owner_id=ticket.owner_id,
                tier_id=ticket.tier_id,
                purchase_price=ticket.purchase_price,
                currency=ticket.currency,
                state=ticket.state.value,
                issued_at=ticket.issued_at,
                expires_at=ticket.expires_at,
                transfer_lock=ticket.transfer_lock,
                listing_price=ticket.listing_price,
                listed_at=ticket.listed_at,
                reserved_by=ticket.reserved_by,
                reserved_until=ticket.reserved_until,
                previous_owner_id=ticket.previous_owner_id,
                transfer_price=ticket.transfer_price,
                version=ticket.version,
                updated_at=ticket.updated_at,
            )
            for ticket in tickets
        )
        await self.session.flush()
        return tickets

    @Logger.io
    async def update(self, *, ticket: TicketEntity, expected_version: int) -> TicketEntity:
        result = await self.session.execute(
            update(TicketModel)
            .where(TicketModel.id == ticket.id, TicketModel.version == expected_version)
            .values(
                owner_id=ticket.owner_id,
                state=ticket.state.value,
                transfer_lock=ticket.transfer_lock,
                listing_price=ticket.listing_price,
                listed_at=ticket.listed_at,
                reserved_by=ticket.reserved_by,
                reserved_until=ticket.reserved_until,
                previous_owner_id=ticket.previous_owner_id,
                transfer_price=ticket.transfer_price,
                version=ticket.version,
                updated_at=ticket.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConcurrentModificationError(
                f'Ticket {ticket.id} changed since version {expected_version}'
            )
        return ticket

    @Logger.io
    async def list_by_owner_and_event(
        self, *, owner_id: str, event_id: str, states: tuple[TicketState, ...]
    ) -> List[TicketEntity]:
        result = await self.session.execute(
            select(TicketModel)
            .where(
                TicketModel.owner_id == owner_id,
                TicketModel.event_id == event_id,
                TicketModel.state.in_([state.value for state in states]),
            )
            .order_by(TicketModel.issued_at, TicketModel.id)
        )
        return [self._to_entity(model) for model in result.scalars().all()]
