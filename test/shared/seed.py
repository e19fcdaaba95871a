"""Store seeding for integration tests (bypasses the components under test)"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

import attrs

from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.payment_record_entity import PaymentRecordEntity
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.ticket_state import TicketState
from src.service.ticketing.domain.value_object.pricing_tier import PricingTier


SELLER_ID = 'user-seller'
BUYER_ID = 'user-buyer-1'
OTHER_BUYER_ID = 'user-buyer-2'


async def seed_event(
    uow_factory: UnitOfWorkFactory,
    *,
    now: datetime,
    capacity: int = 10,
    tickets_issued: int = 0,
    pricing_tiers: Optional[List[PricingTier]] = None,
    end_time: Optional[datetime] = None,
    name: str = 'Open Air Zurich',
) -> EventEntity:
    event = EventEntity.create(
        name=name,
        capacity=capacity,
        pricing_tiers=pricing_tiers or [],
        now=now,
        end_time=end_time,
    )
    if tickets_issued:
        event = attrs.evolve(
            event,
            tickets_issued=tickets_issued,
            tickets_remaining=capacity - tickets_issued,
        )
    event.validate_counters()

    async with uow_factory() as uow:
        await uow.event_command_repo.create(event=event)
        await uow.commit()
    return event


async def seed_ticket(
    uow_factory: UnitOfWorkFactory,
    *,
    event_id: str,
    owner_id: str,
    now: datetime,
    listing_price: Optional[Decimal] = None,
    purchase_price: Decimal = Decimal('20.00'),
) -> TicketEntity:
    ticket = TicketEntity.issue(
        event_id=event_id,
        owner_id=owner_id,
        tier_id=None,
        purchase_price=purchase_price,
        currency='CHF',
        expires_at=None,
        now=now,
    )
    if listing_price is not None:
        ticket = attrs.evolve(
            ticket, state=TicketState.LISTED, listing_price=listing_price, listed_at=now
        )

    async with uow_factory() as uow:
        await uow.ticket_command_repo.create_many(tickets=[ticket])
        await uow.commit()
    return ticket


async def seed_payment_record(
    uow_factory: UnitOfWorkFactory, record: PaymentRecordEntity
) -> PaymentRecordEntity:
    async with uow_factory() as uow:
        await uow.payment_record_repo.create(record=record)
        await uow.commit()
    return record


async def load_event(uow_factory: UnitOfWorkFactory, event_id: str) -> EventEntity:
    async with uow_factory() as uow:
        event = await uow.event_command_repo.get_by_id(event_id=event_id)
    assert event is not None
    return event


async def load_ticket(uow_factory: UnitOfWorkFactory, ticket_id: str) -> TicketEntity:
    async with uow_factory() as uow:
        ticket = await uow.ticket_command_repo.get_by_id(ticket_id=ticket_id)
    assert ticket is not None
    return ticket


async def load_record(uow_factory: UnitOfWorkFactory, payment_id: str) -> PaymentRecordEntity:
    async with uow_factory() as uow:
        record = await uow.payment_record_repo.get_by_id(payment_id=payment_id)
    assert record is not None
    return record


async def list_owned_tickets(
    uow_factory: UnitOfWorkFactory, *, owner_id: str, event_id: str
) -> List[TicketEntity]:
    async with uow_factory() as uow:
        return await uow.ticket_command_repo.list_by_owner_and_event(
            owner_id=owner_id, event_id=event_id, states=tuple(TicketState)
        )
