"""
Settlement against a real store: every notification variant, replays and the
paid-but-unfulfilled path.
"""

import asyncio
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

import pytest

from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.service.ticketing.app.command.reservation_manager import ReservationManager
from src.service.ticketing.app.command.settlement_processor import SettlementProcessor
from src.service.ticketing.app.dto.settlement_outcome import SettlementOutcome
from src.service.ticketing.domain.domain_error import UnknownTransactionError
from src.service.ticketing.domain.domain_event.payment_notification import (
    ChargeRefunded,
    PaymentCanceled,
    PaymentFailed,
    PaymentNotification,
    PaymentSucceeded,
)
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.entity.payment_record_entity import PaymentRecordEntity
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.payment_status import PaymentStatus
from src.service.ticketing.domain.enum.payment_type import PaymentType
from src.service.ticketing.domain.enum.ticket_state import TicketState
from src.service.ticketing.domain.value_object.pricing_tier import PricingTier
from test.shared.seed import (
    BUYER_ID,
    OTHER_BUYER_ID,
    SELLER_ID,
    list_owned_tickets,
    load_event,
    load_record,
    load_ticket,
    seed_event,
    seed_payment_record,
    seed_ticket,
)
from test.shared.utils import MutableClock


@pytest.fixture
def processor(uow_factory: UnitOfWorkFactory, clock: MutableClock) -> SettlementProcessor:
    return SettlementProcessor(uow_factory=uow_factory, max_retries=5, clock=clock)


@pytest.fixture
def reservations(uow_factory: UnitOfWorkFactory, clock: MutableClock) -> ReservationManager:
    return ReservationManager(
        uow_factory=uow_factory,
        reservation_ttl=timedelta(minutes=5),
        max_retries=5,
        clock=clock,
    )


def _primary(
    transaction_id: str,
    *,
    event_id: str,
    buyer_id: str,
    now: datetime,
    quantity: int = 1,
    tier_id: Optional[str] = None,
    amount: int = 2500,
) -> PaymentRecordEntity:
    return PaymentRecordEntity.create_primary(
        transaction_id=transaction_id,
        buyer_id=buyer_id,
        event_id=event_id,
        tier_id=tier_id,
        quantity=quantity,
        amount=amount,
        currency='chf',
        now=now,
    )


def _marketplace(
    transaction_id: str, *, ticket_id: str, event_id: str, buyer_id: str, now: datetime
) -> PaymentRecordEntity:
    return PaymentRecordEntity.create_marketplace(
        transaction_id=transaction_id,
        buyer_id=buyer_id,
        seller_id=SELLER_ID,
        event_id=event_id,
        ticket_id=ticket_id,
        amount=2500,
        currency='chf',
        reserved_until=None,
        now=now,
    )


@pytest.mark.integration
class TestPrimarySettlement:
    async def test_success_issues_tickets_and_moves_counters(
        self, processor: SettlementProcessor, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        """
        Given: a pending primary payment for 2 VIP tickets
        When: the gateway reports success
        Then: 2 tickets are issued to the buyer and both counters move by 2
        """
        # Arrange
        event = await seed_event(
            uow_factory,
            now=clock(),
            capacity=10,
            pricing_tiers=[
                PricingTier(name='VIP', price=Decimal('45.00'), quantity=4, remaining=4)
            ],
        )
        await seed_payment_record(
            uow_factory,
            _primary(
                'pi_1',
                event_id=event.id,
                buyer_id=BUYER_ID,
                now=clock(),
                quantity=2,
                tier_id='VIP',
                amount=9000,
            ),
        )

        # Act
        outcome = await processor.process(
            PaymentSucceeded(notification_id='evt_1', transaction_id='pi_1')
        )

        # Assert
        assert outcome == SettlementOutcome.APPLIED
        record = await load_record(uow_factory, 'pi_1')
        assert record.status == PaymentStatus.SUCCEEDED
        assert record.needs_reconciliation is False

        updated = await load_event(uow_factory, event.id)
        assert updated.tickets_issued == 2
        assert updated.tickets_remaining == 8
        assert updated.find_tier('VIP').remaining == 2  # type: ignore[union-attr]

        tickets = await list_owned_tickets(uow_factory, owner_id=BUYER_ID, event_id=event.id)
        assert len(tickets) == 2
        assert {t.state for t in tickets} == {TicketState.ISSUED}
        assert {t.purchase_price for t in tickets} == {Decimal('45.00')}
        assert {t.tier_id for t in tickets} == {'VIP'}

    async def test_replayed_success_is_duplicate(
        self, processor: SettlementProcessor, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        event = await seed_event(uow_factory, now=clock(), capacity=5)
        await seed_payment_record(
            uow_factory, _primary('pi_1', event_id=event.id, buyer_id=BUYER_ID, now=clock())
        )
        notification = PaymentSucceeded(notification_id='evt_1', transaction_id='pi_1')

        first = await processor.process(notification)
        second = await processor.process(notification)

        assert first == SettlementOutcome.APPLIED
        assert second == SettlementOutcome.DUPLICATE
        assert (await load_event(uow_factory, event.id)).tickets_issued == 1
        tickets = await list_owned_tickets(uow_factory, owner_id=BUYER_ID, event_id=event.id)
        assert len(tickets) == 1

    async def test_concurrent_deliveries_apply_once(
        self, processor: SettlementProcessor, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        event = await seed_event(uow_factory, now=clock(), capacity=5)
        await seed_payment_record(
            uow_factory, _primary('pi_1', event_id=event.id, buyer_id=BUYER_ID, now=clock())
        )
        notification = PaymentSucceeded(notification_id='evt_1', transaction_id='pi_1')

        outcomes = await asyncio.gather(
            processor.process(notification), processor.process(notification)
        )

        assert sorted(outcomes) == sorted(
            [SettlementOutcome.APPLIED, SettlementOutcome.DUPLICATE]
        )
        assert (await load_event(uow_factory, event.id)).tickets_issued == 1

    async def test_last_ticket_race_flags_the_loser(
        self, processor: SettlementProcessor, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        """
        Given: one ticket remaining and two paid primary purchases of quantity 1
        When: both successes settle concurrently
        Then: exactly one is applied, the other is flagged and queued for reconciliation
        """
        # Arrange
        event = await seed_event(uow_factory, now=clock(), capacity=10, tickets_issued=9)
        await seed_payment_record(
            uow_factory, _primary('pi_a', event_id=event.id, buyer_id=BUYER_ID, now=clock())
        )
        await seed_payment_record(
            uow_factory,
            _primary('pi_b', event_id=event.id, buyer_id=OTHER_BUYER_ID, now=clock()),
        )

        # Act
        outcomes = await asyncio.gather(
            processor.process(PaymentSucceeded(notification_id='evt_a', transaction_id='pi_a')),
            processor.process(PaymentSucceeded(notification_id='evt_b', transaction_id='pi_b')),
        )

        # Assert
        assert sorted(outcomes) == sorted(
            [SettlementOutcome.APPLIED, SettlementOutcome.NEEDS_RECONCILIATION]
        )
        updated = await load_event(uow_factory, event.id)
        assert updated.tickets_remaining == 0
        assert updated.tickets_issued == 10

        records = [await load_record(uow_factory, pid) for pid in ('pi_a', 'pi_b')]
        assert {r.status for r in records} == {PaymentStatus.SUCCEEDED}
        flagged = [r for r in records if r.needs_reconciliation]
        assert len(flagged) == 1

        async with uow_factory() as uow:
            entries = await uow.reconciliation_repo.list_unresolved()
        assert [e.payment_id for e in entries] == [flagged[0].id]
        assert entries[0].payment_type == PaymentType.PRIMARY

        loser_id = OTHER_BUYER_ID if flagged[0].id == 'pi_b' else BUYER_ID
        assert await list_owned_tickets(uow_factory, owner_id=loser_id, event_id=event.id) == []

    async def test_success_for_missing_event_is_flagged(
        self, processor: SettlementProcessor, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        await seed_payment_record(
            uow_factory, _primary('pi_1', event_id='gone', buyer_id=BUYER_ID, now=clock())
        )

        outcome = await processor.process(
            PaymentSucceeded(notification_id='evt_1', transaction_id='pi_1')
        )

        assert outcome == SettlementOutcome.NEEDS_RECONCILIATION
        assert (await load_record(uow_factory, 'pi_1')).needs_reconciliation is True

    async def test_late_success_after_failure_is_flagged(
        self, processor: SettlementProcessor, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        event = await seed_event(uow_factory, now=clock(), capacity=5)
        await seed_payment_record(
            uow_factory, _primary('pi_1', event_id=event.id, buyer_id=BUYER_ID, now=clock())
        )
        await processor.process(
            PaymentFailed(notification_id='evt_1', transaction_id='pi_1', reason='declined')
        )

        outcome = await processor.process(
            PaymentSucceeded(notification_id='evt_2', transaction_id='pi_1')
        )

        assert outcome == SettlementOutcome.NEEDS_RECONCILIATION
        record = await load_record(uow_factory, 'pi_1')
        assert record.status == PaymentStatus.SUCCEEDED
        assert record.needs_reconciliation is True
        # No inventory change for a payment that was already written off
        assert (await load_event(uow_factory, event.id)).tickets_issued == 0

    async def test_refund_revokes_tickets_without_restocking(
        self, processor: SettlementProcessor, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        """
        Given: a settled primary purchase of 2 tickets
        When: the charge is refunded
        Then: both tickets are revoked and the counters stay where they were
        """
        # Arrange
        event = await seed_event(uow_factory, now=clock(), capacity=10)
        await seed_payment_record(
            uow_factory,
            _primary(
                'pi_1',
                event_id=event.id,
                buyer_id=BUYER_ID,
                now=clock(),
                quantity=2,
                amount=5000,
            ),
        )
        await processor.process(PaymentSucceeded(notification_id='evt_1', transaction_id='pi_1'))

        # Act
        outcome = await processor.process(
            ChargeRefunded(notification_id='evt_2', transaction_id='pi_1', charge_id='ch_1')
        )

        # Assert
        assert outcome == SettlementOutcome.APPLIED
        assert (await load_record(uow_factory, 'pi_1')).status == PaymentStatus.REFUNDED
        tickets = await list_owned_tickets(uow_factory, owner_id=BUYER_ID, event_id=event.id)
        assert [t.state for t in tickets] == [TicketState.REVOKED, TicketState.REVOKED]
        updated = await load_event(uow_factory, event.id)
        assert updated.tickets_remaining == 8

    async def test_refund_after_failure_is_ignored(
        self, processor: SettlementProcessor, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        event = await seed_event(uow_factory, now=clock(), capacity=5)
        await seed_payment_record(
            uow_factory, _primary('pi_1', event_id=event.id, buyer_id=BUYER_ID, now=clock())
        )
        await processor.process(PaymentCanceled(notification_id='evt_1', transaction_id='pi_1'))

        outcome = await processor.process(
            ChargeRefunded(notification_id='evt_2', transaction_id='pi_1')
        )

        assert outcome == SettlementOutcome.IGNORED
        assert (await load_record(uow_factory, 'pi_1')).status == PaymentStatus.CANCELED

    async def test_repeated_failure_is_duplicate(
        self, processor: SettlementProcessor, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        event = await seed_event(uow_factory, now=clock(), capacity=5)
        await seed_payment_record(
            uow_factory, _primary('pi_1', event_id=event.id, buyer_id=BUYER_ID, now=clock())
        )
        failed = PaymentFailed(notification_id='evt_1', transaction_id='pi_1', reason='declined')

        assert await processor.process(failed) == SettlementOutcome.APPLIED
        assert await processor.process(failed) == SettlementOutcome.DUPLICATE
        record = await load_record(uow_factory, 'pi_1')
        assert record.status == PaymentStatus.FAILED
        assert record.failure_reason == 'declined'

    async def test_tierless_purchase_of_fully_tiered_event_is_flagged(
        self, processor: SettlementProcessor, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        event = await seed_event(
            uow_factory,
            now=clock(),
            capacity=10,
            pricing_tiers=[
                PricingTier(name='GA', price=Decimal('25.00'), quantity=10, remaining=10)
            ],
        )
        await seed_payment_record(
            uow_factory, _primary('pi_1', event_id=event.id, buyer_id=BUYER_ID, now=clock())
        )

        outcome = await processor.process(
            PaymentSucceeded(notification_id='evt_1', transaction_id='pi_1')
        )

        assert outcome == SettlementOutcome.NEEDS_RECONCILIATION
        assert (await load_record(uow_factory, 'pi_1')).needs_reconciliation is True
        unchanged = await load_event(uow_factory, event.id)
        assert unchanged.tickets_remaining == 10
        assert unchanged.find_tier('GA').remaining == 10  # type: ignore[union-attr]
        async with uow_factory() as uow:
            entries = await uow.reconciliation_repo.list_unresolved()
        assert [e.payment_id for e in entries] == ['pi_1']

    async def test_counter_drift_is_flagged_instead_of_failing(
        self, processor: SettlementProcessor, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        """
        Given: a stored event whose tier counters already exceed its remaining seats
        When: a paid tier purchase settles against it
        Then: the write is refused and the payment is flagged, not left pending
        """
        # Arrange
        drifted = EventEntity(
            id='event-drifted',
            name='Open Air Zurich',
            capacity=10,
            tickets_issued=8,
            tickets_remaining=2,
            pricing_tiers=[
                PricingTier(name='VIP', price=Decimal('45.00'), quantity=4, remaining=4)
            ],
            created_at=clock(),
            updated_at=clock(),
        )
        async with uow_factory() as uow:
            await uow.event_command_repo.create(event=drifted)
            await uow.commit()
        await seed_payment_record(
            uow_factory,
            _primary(
                'pi_1', event_id=drifted.id, buyer_id=BUYER_ID, now=clock(), tier_id='VIP'
            ),
        )

        # Act
        outcome = await processor.process(
            PaymentSucceeded(notification_id='evt_1', transaction_id='pi_1')
        )

        # Assert
        assert outcome == SettlementOutcome.NEEDS_RECONCILIATION
        record = await load_record(uow_factory, 'pi_1')
        assert record.status == PaymentStatus.SUCCEEDED
        assert record.needs_reconciliation is True
        assert (await load_event(uow_factory, drifted.id)).tickets_issued == 8
        assert await list_owned_tickets(uow_factory, owner_id=BUYER_ID, event_id=drifted.id) == []

    async def test_refund_of_flagged_purchase_keeps_tickets_of_other_purchase(
        self, processor: SettlementProcessor, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        """
        Given: a buyer whose first purchase took the last ticket and whose second was flagged
        When: the flagged purchase is refunded
        Then: it is marked refunded and the ticket of the first purchase is left alone
        """
        # Arrange
        event = await seed_event(uow_factory, now=clock(), capacity=10, tickets_issued=9)
        for transaction_id in ('pi_a', 'pi_b'):
            await seed_payment_record(
                uow_factory,
                _primary(transaction_id, event_id=event.id, buyer_id=BUYER_ID, now=clock()),
            )
        await processor.process(PaymentSucceeded(notification_id='evt_a', transaction_id='pi_a'))
        flagged = await processor.process(
            PaymentSucceeded(notification_id='evt_b', transaction_id='pi_b')
        )
        assert flagged == SettlementOutcome.NEEDS_RECONCILIATION

        # Act
        outcome = await processor.process(
            ChargeRefunded(notification_id='evt_r', transaction_id='pi_b', charge_id='ch_b')
        )

        # Assert
        assert outcome == SettlementOutcome.APPLIED
        assert (await load_record(uow_factory, 'pi_b')).status == PaymentStatus.REFUNDED
        assert (await load_record(uow_factory, 'pi_a')).status == PaymentStatus.SUCCEEDED
        tickets = await list_owned_tickets(uow_factory, owner_id=BUYER_ID, event_id=event.id)
        assert [t.state for t in tickets] == [TicketState.ISSUED]

    async def test_refund_while_pending_revokes_nothing(
        self, processor: SettlementProcessor, uow_factory: UnitOfWorkFactory, clock: MutableClock
    ) -> None:
        event = await seed_event(uow_factory, now=clock(), capacity=10)
        for transaction_id in ('pi_a', 'pi_b'):
            await seed_payment_record(
                uow_factory,
                _primary(transaction_id, event_id=event.id, buyer_id=BUYER_ID, now=clock()),
            )
        await processor.process(PaymentSucceeded(notification_id='evt_a', transaction_id='pi_a'))

        outcome = await processor.process(
            ChargeRefunded(notification_id='evt_r', transaction_id='pi_b')
        )

        assert outcome == SettlementOutcome.APPLIED
        assert (await load_record(uow_factory, 'pi_b')).status == PaymentStatus.REFUNDED
        tickets = await list_owned_tickets(uow_factory, owner_id=BUYER_ID, event_id=event.id)
        assert [t.state for t in tickets] == [TicketState.ISSUED]


@pytest.mark.integration
class TestMarketplaceSettlement:
    async def _reserved_listing(
        self,
        uow_factory: UnitOfWorkFactory,
        reservations: ReservationManager,
        clock: MutableClock,
    ) -> tuple[EventEntity, TicketEntity]:
        event = await seed_event(uow_factory, now=clock(), capacity=10, tickets_issued=1)
        ticket = await seed_ticket(
            uow_factory,
            event_id=event.id,
            owner_id=SELLER_ID,
            now=clock(),
            listing_price=Decimal('25.00'),
        )
        await reservations.reserve(ticket_id=ticket.id, buyer_id=BUYER_ID)
        await seed_payment_record(
            uow_factory,
            _marketplace(
                'pi_m', ticket_id=ticket.id, event_id=event.id, buyer_id=BUYER_ID, now=clock()
            ),
        )
        return event, ticket

    async def test_success_transfers_ownership_with_audit_row(
        self,
        processor: SettlementProcessor,
        reservations: ReservationManager,
        uow_factory: UnitOfWorkFactory,
        clock: MutableClock,
    ) -> None:
        event, ticket = await self._reserved_listing(uow_factory, reservations, clock)

        outcome = await processor.process(
            PaymentSucceeded(notification_id='evt_1', transaction_id='pi_m')
        )

        assert outcome == SettlementOutcome.APPLIED
        transferred = await load_ticket(uow_factory, ticket.id)
        assert transferred.owner_id == BUYER_ID
        assert transferred.previous_owner_id == SELLER_ID
        assert transferred.state == TicketState.TRANSFERRED
        assert transferred.transfer_price == Decimal('25.00')
        assert transferred.listing_price is None
        assert transferred.reserved_by is None

        async with uow_factory() as uow:
            transfers = await uow.transfer_record_repo.list_by_ticket(ticket_id=ticket.id)
        assert len(transfers) == 1
        assert transfers[0].from_user_id == SELLER_ID
        assert transfers[0].to_user_id == BUYER_ID
        assert transfers[0].payment_reference_id == 'pi_m'
        # Resale never touches event counters
        assert (await load_event(uow_factory, event.id)).tickets_issued == 1

    async def test_replay_writes_one_transfer(
        self,
        processor: SettlementProcessor,
        reservations: ReservationManager,
        uow_factory: UnitOfWorkFactory,
        clock: MutableClock,
    ) -> None:
        _, ticket = await self._reserved_listing(uow_factory, reservations, clock)
        notification = PaymentSucceeded(notification_id='evt_1', transaction_id='pi_m')

        await processor.process(notification)
        assert await processor.process(notification) == SettlementOutcome.DUPLICATE

        async with uow_factory() as uow:
            transfers = await uow.transfer_record_repo.list_by_ticket(ticket_id=ticket.id)
        assert len(transfers) == 1

    async def test_failure_clears_hold_and_keeps_listing(
        self,
        processor: SettlementProcessor,
        reservations: ReservationManager,
        uow_factory: UnitOfWorkFactory,
        clock: MutableClock,
    ) -> None:
        """
        Given: a reserved listing with a pending marketplace payment
        When: the gateway reports the payment failed
        Then: the hold is cleared, the ticket stays listed and the seller keeps it
        """
        _, ticket = await self._reserved_listing(uow_factory, reservations, clock)

        outcome = await processor.process(
            PaymentFailed(notification_id='evt_1', transaction_id='pi_m', reason='declined')
        )

        assert outcome == SettlementOutcome.APPLIED
        after = await load_ticket(uow_factory, ticket.id)
        assert after.state == TicketState.LISTED
        assert after.owner_id == SELLER_ID
        assert after.reserved_by is None
        assert after.listing_price == Decimal('25.00')
        assert (await load_record(uow_factory, 'pi_m')).status == PaymentStatus.FAILED

    async def test_success_after_listing_withdrawn_is_flagged(
        self,
        processor: SettlementProcessor,
        reservations: ReservationManager,
        uow_factory: UnitOfWorkFactory,
        clock: MutableClock,
    ) -> None:
        _, ticket = await self._reserved_listing(uow_factory, reservations, clock)
        # Hold expired, seller withdrew the listing before the payment settled
        clock.advance(minutes=6)
        async with uow_factory() as uow:
            current = await uow.ticket_command_repo.get_by_id(ticket_id=ticket.id)
            assert current is not None
            await uow.ticket_command_repo.update(
                ticket=current.cancel_listing(owner_id=SELLER_ID, now=clock()),
                expected_version=current.version,
            )
            await uow.commit()

        outcome = await processor.process(
            PaymentSucceeded(notification_id='evt_1', transaction_id='pi_m')
        )

        assert outcome == SettlementOutcome.NEEDS_RECONCILIATION
        after = await load_ticket(uow_factory, ticket.id)
        assert after.owner_id == SELLER_ID
        async with uow_factory() as uow:
            entries = await uow.reconciliation_repo.list_unresolved()
            transfers = await uow.transfer_record_repo.list_by_ticket(ticket_id=ticket.id)
        assert [e.payment_type for e in entries] == [PaymentType.MARKETPLACE]
        assert transfers == []

    async def test_refund_after_transfer_revokes_ticket(
        self,
        processor: SettlementProcessor,
        reservations: ReservationManager,
        uow_factory: UnitOfWorkFactory,
        clock: MutableClock,
    ) -> None:
        _, ticket = await self._reserved_listing(uow_factory, reservations, clock)
        await processor.process(PaymentSucceeded(notification_id='evt_1', transaction_id='pi_m'))

        outcome = await processor.process(
            ChargeRefunded(notification_id='evt_2', transaction_id='pi_m')
        )

        assert outcome == SettlementOutcome.APPLIED
        assert (await load_ticket(uow_factory, ticket.id)).state == TicketState.REVOKED

    async def test_refund_before_settlement_only_releases_hold(
        self,
        processor: SettlementProcessor,
        reservations: ReservationManager,
        uow_factory: UnitOfWorkFactory,
        clock: MutableClock,
    ) -> None:
        _, ticket = await self._reserved_listing(uow_factory, reservations, clock)

        outcome = await processor.process(
            ChargeRefunded(notification_id='evt_1', transaction_id='pi_m')
        )

        assert outcome == SettlementOutcome.APPLIED
        after = await load_ticket(uow_factory, ticket.id)
        assert after.state == TicketState.LISTED
        assert after.owner_id == SELLER_ID
        assert after.reserved_by is None


@pytest.mark.integration
@pytest.mark.parametrize(
    'notification',
    [
        PaymentSucceeded(notification_id='evt_1', transaction_id='pi_1'),
        PaymentFailed(notification_id='evt_1', transaction_id='pi_1', reason='declined'),
        ChargeRefunded(notification_id='evt_1', transaction_id='pi_1'),
    ],
)
async def test_notification_without_record_is_refused(
    processor: SettlementProcessor, notification: PaymentNotification
) -> None:
    with pytest.raises(UnknownTransactionError):
        await processor.process(notification)


@pytest.mark.integration
async def test_success_ahead_of_record_applies_on_redelivery(
    processor: SettlementProcessor, uow_factory: UnitOfWorkFactory, clock: MutableClock
) -> None:
    event = await seed_event(uow_factory, now=clock(), capacity=5)
    notification = PaymentSucceeded(notification_id='evt_1', transaction_id='pi_early')

    with pytest.raises(UnknownTransactionError):
        await processor.process(notification)
    await seed_payment_record(
        uow_factory, _primary('pi_early', event_id=event.id, buyer_id=BUYER_ID, now=clock())
    )

    assert await processor.process(notification) == SettlementOutcome.APPLIED
    assert (await load_event(uow_factory, event.id)).tickets_issued == 1
