from datetime import timedelta
from decimal import Decimal

import pytest

from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import ForbiddenError, InvalidArgumentError
from src.service.ticketing.app.command.inventory_ledger import InventoryLedger
from src.service.ticketing.app.command.reservation_manager import ReservationManager
from src.service.ticketing.domain.domain_error import (
    AlreadyReservedError,
    EventNotFoundError,
    NotListedError,
    SoldOutError,
    TicketNotFoundError,
    TierRequiredError,
    TierSoldOutError,
)
from src.service.ticketing.domain.enum.ticket_state import TicketState
from src.service.ticketing.domain.value_object.pricing_tier import PricingTier
from test.shared.seed import BUYER_ID, SELLER_ID, load_event, load_ticket, seed_event, seed_ticket
from test.shared.utils import MutableClock


@pytest.fixture
def ledger(uow_factory: UnitOfWorkFactory, clock: MutableClock) -> InventoryLedger:
    return InventoryLedger(uow_factory=uow_factory, max_retries=5, clock=clock)


@pytest.mark.integration
class TestCheckAvailability:
    async def test_snapshot_of_tier(
        self, ledger: InventoryLedger, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        event = await seed_event(
            uow_factory,
            now=clock(),
            capacity=10,
            pricing_tiers=[
                PricingTier(name='Floor', price=Decimal('60.00'), quantity=3, remaining=3)
            ],
        )

        snapshot = await ledger.check_availability_for_primary_purchase(
            event_id=event.id, tier_id='Floor', quantity=2
        )

        assert snapshot.event_name == event.name
        assert snapshot.tickets_remaining == 10
        assert snapshot.tier_remaining == 3
        assert snapshot.unit_price == Decimal('60.00')

    async def test_check_does_not_decrement(
        self, ledger: InventoryLedger, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        event = await seed_event(uow_factory, now=clock(), capacity=2)

        await ledger.check_availability_for_primary_purchase(
            event_id=event.id, tier_id=None, quantity=2
        )

        assert (await load_event(uow_factory, event.id)).tickets_remaining == 2

    async def test_sold_out(
        self, ledger: InventoryLedger, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        event = await seed_event(uow_factory, now=clock(), capacity=10, tickets_issued=10)

        with pytest.raises(SoldOutError):
            await ledger.check_availability_for_primary_purchase(
                event_id=event.id, tier_id=None, quantity=1
            )

    async def test_tier_sold_out(
        self, ledger: InventoryLedger, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        event = await seed_event(
            uow_factory,
            now=clock(),
            capacity=10,
            pricing_tiers=[PricingTier(name='VIP', price=Decimal('90'), quantity=1, remaining=1)],
        )

        with pytest.raises(TierSoldOutError):
            await ledger.check_availability_for_primary_purchase(
                event_id=event.id, tier_id='VIP', quantity=2
            )

    async def test_tierless_check_on_fully_tiered_event(
        self, ledger: InventoryLedger, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        event = await seed_event(
            uow_factory,
            now=clock(),
            capacity=10,
            pricing_tiers=[PricingTier(name='GA', price=Decimal('25'), quantity=10, remaining=10)],
        )

        with pytest.raises(TierRequiredError):
            await ledger.check_availability_for_primary_purchase(
                event_id=event.id, tier_id=None, quantity=1
            )

    async def test_missing_event(self, ledger: InventoryLedger) -> None:
        with pytest.raises(EventNotFoundError):
            await ledger.check_availability_for_primary_purchase(
                event_id='missing', tier_id=None, quantity=1
            )

    async def test_quantity_below_one(self, ledger: InventoryLedger) -> None:
        with pytest.raises(InvalidArgumentError):
            await ledger.check_availability_for_primary_purchase(
                event_id='any', tier_id=None, quantity=0
            )


@pytest.mark.integration
class TestListing:
    async def test_list_and_withdraw(
        self, ledger: InventoryLedger, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        event = await seed_event(uow_factory, now=clock(), capacity=5, tickets_issued=1)
        ticket = await seed_ticket(uow_factory, event_id=event.id, owner_id=SELLER_ID, now=clock())

        listed = await ledger.list_ticket_for_resale(
            ticket_id=ticket.id, owner_id=SELLER_ID, listing_price=Decimal('30.00')
        )
        assert listed.state == TicketState.LISTED
        assert (await load_ticket(uow_factory, ticket.id)).listing_price == Decimal('30.00')

        withdrawn = await ledger.cancel_listing(ticket_id=ticket.id, owner_id=SELLER_ID)
        assert withdrawn.state == TicketState.ISSUED
        stored = await load_ticket(uow_factory, ticket.id)
        assert stored.state == TicketState.ISSUED
        assert stored.listing_price is None

    async def test_only_owner_lists(
        self, ledger: InventoryLedger, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        event = await seed_event(uow_factory, now=clock(), capacity=5, tickets_issued=1)
        ticket = await seed_ticket(uow_factory, event_id=event.id, owner_id=SELLER_ID, now=clock())

        with pytest.raises(ForbiddenError):
            await ledger.list_ticket_for_resale(
                ticket_id=ticket.id, owner_id=BUYER_ID, listing_price=Decimal('30.00')
            )

    async def test_withdraw_refused_during_hold(
        self, ledger: InventoryLedger, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        event = await seed_event(uow_factory, now=clock(), capacity=5, tickets_issued=1)
        ticket = await seed_ticket(
            uow_factory,
            event_id=event.id,
            owner_id=SELLER_ID,
            now=clock(),
            listing_price=Decimal('25.00'),
        )
        reservations = ReservationManager(
            uow_factory=uow_factory, reservation_ttl=timedelta(minutes=5), max_retries=5, clock=clock
        )
        await reservations.reserve(ticket_id=ticket.id, buyer_id=BUYER_ID)

        with pytest.raises(AlreadyReservedError):
            await ledger.cancel_listing(ticket_id=ticket.id, owner_id=SELLER_ID)

        clock.advance(minutes=6)
        withdrawn = await ledger.cancel_listing(ticket_id=ticket.id, owner_id=SELLER_ID)
        assert withdrawn.state == TicketState.ISSUED

    async def test_withdraw_unlisted(
        self, ledger: InventoryLedger, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        event = await seed_event(uow_factory, now=clock(), capacity=5, tickets_issued=1)
        ticket = await seed_ticket(uow_factory, event_id=event.id, owner_id=SELLER_ID, now=clock())

        with pytest.raises(NotListedError):
            await ledger.cancel_listing(ticket_id=ticket.id, owner_id=SELLER_ID)

    async def test_missing_ticket(self, ledger: InventoryLedger) -> None:
        with pytest.raises(TicketNotFoundError):
            await ledger.list_ticket_for_resale(
                ticket_id='missing', owner_id=SELLER_ID, listing_price=Decimal('10')
            )
