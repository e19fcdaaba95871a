import time
from datetime import datetime
from typing import Awaitable, Callable, Self, TypeVar, assert_never

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.clock.utc_clock import Clock, utc_now
from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.optimistic_retry import run_with_optimistic_retry
from src.platform.database.unit_of_work import AbstractUnitOfWork, UnitOfWorkFactory
from src.platform.exception.exceptions import (
    FailedPreconditionError,
    InvalidArgumentError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.ticketing.app.dto.settlement_outcome import SettlementOutcome
from src.service.ticketing.domain.domain_error import (
    EventNotFoundError,
    InventoryInvariantError,
    TicketNotFoundError,
    UnknownTransactionError,
)
from src.service.ticketing.domain.domain_event.payment_notification import (
    AccountUpdated,
    ChargeRefunded,
    PaymentCanceled,
    PaymentFailed,
    PaymentNotification,
    PaymentSucceeded,
    UnhandledNotification,
)
from src.service.ticketing.domain.entity.payment_record_entity import PaymentRecordEntity
from src.service.ticketing.domain.entity.reconciliation_entry_entity import (
    ReconciliationEntryEntity,
)
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.entity.transfer_record_entity import TransferRecordEntity
from src.service.ticketing.domain.enum.payment_status import PaymentStatus
from src.service.ticketing.domain.enum.payment_type import PaymentType
from src.service.ticketing.domain.enum.ticket_state import TicketState
from src.service.ticketing.domain.value_object.money import (
    from_minor_units,
    unit_price_from_minor_units,
)


_N = TypeVar('_N')

# Inventory rejections that turn a paid notification into a reconciliation entry
_UNFULFILLABLE = (
    FailedPreconditionError,
    NotFoundError,
    InvalidArgumentError,
    InventoryInvariantError,
)


class SettlementProcessor:
    """
    Idempotent state machine driven by gateway notifications.

    Each notification is applied in exactly one Unit of Work: the PaymentRecord
    transition and every inventory change it implies commit together or not at
    all. Concurrent deliveries about the same transaction race on the record's
    conditional write; the loser re-reads and finds the work already done.

    Record transitions (anything else is logged and ignored):
        pending   -> succeeded | failed | canceled | refunded
        succeeded -> refunded
        failed | canceled -> succeeded, only as paid-but-unfulfilled

    A refund revokes only what its payment delivered: nothing while the record
    is still pending or was flagged as paid-but-unfulfilled.

    A notification for a transaction without a record is refused with
    ``UnknownTransactionError`` so the gateway redelivers it.

    Settlement never calls out to the gateway.
    """

    def __init__(
        self, *, uow_factory: UnitOfWorkFactory, max_retries: int, clock: Clock = utc_now
    ) -> None:
        self.uow_factory = uow_factory
        self.max_retries = max_retries
        self.clock = clock

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory]),
        settings: Settings = Depends(Provide[Container.config_service]),
        clock: Clock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(
            uow_factory=uow_factory, max_retries=settings.SETTLEMENT_MAX_RETRIES, clock=clock
        )

    @Logger.io
    async def process(self, notification: PaymentNotification) -> SettlementOutcome:
        started = time.perf_counter()

        match notification:
            case PaymentSucceeded():
                outcome = await self._with_retry(self._settle_success, notification)
            case PaymentFailed() | PaymentCanceled():
                outcome = await self._with_retry(self._settle_failure, notification)
            case ChargeRefunded():
                outcome = await self._with_retry(self._settle_refund, notification)
            case AccountUpdated():
                Logger.base.info(
                    f'🏦 [SETTLE] account {notification.account_id} updated: '
                    f'details_submitted={notification.details_submitted} '
                    f'charges_enabled={notification.charges_enabled} '
                    f'payouts_enabled={notification.payouts_enabled}'
                )
                outcome = SettlementOutcome.ACKNOWLEDGED
            case UnhandledNotification():
                Logger.base.info(
                    f'📭 [SETTLE] unhandled notification type {notification.notification_type} '
                    f'({notification.notification_id})'
                )
                outcome = SettlementOutcome.IGNORED
            case _:
                assert_never(notification)

        metrics.record_settlement(
            notification=type(notification).__name__,
            outcome=outcome.value,
            duration=time.perf_counter() - started,
        )
        return outcome

    async def _with_retry(
        self, handler: Callable[[_N], Awaitable[SettlementOutcome]], notification: _N
    ) -> SettlementOutcome:
        transaction_id = getattr(notification, 'transaction_id', '?')
        return await run_with_optimistic_retry(
            lambda: handler(notification),
            max_attempts=self.max_retries,
            label=f'settle {type(notification).__name__} {transaction_id}',
        )

    async def _load_record(
        self, uow: AbstractUnitOfWork, transaction_id: str
    ) -> PaymentRecordEntity:
        record = await uow.payment_record_repo.get_by_id(payment_id=transaction_id)
        if record is None:
            # The intent may not have written its record yet, let the gateway redeliver
            Logger.base.warning(f'⏳ [SETTLE] {transaction_id} has no payment record yet, deferred')
            raise UnknownTransactionError(transaction_id)
        return record

    async def _settle_success(self, notification: PaymentSucceeded) -> SettlementOutcome:
        now = self.clock()
        async with self.uow_factory() as uow:
            record = await self._load_record(uow, notification.transaction_id)
            if record.status == PaymentStatus.SUCCEEDED:
                Logger.base.info(f'🔁 [SETTLE] {record.id} already succeeded, duplicate')
                return SettlementOutcome.DUPLICATE
            if record.status == PaymentStatus.REFUNDED:
                Logger.base.warning(f'⏪ [SETTLE] {record.id} succeeded after refund, ignored')
                return SettlementOutcome.IGNORED
            if record.is_terminal_failure:
                return await self._flag_paid_but_unfulfilled(
                    uow, record, reason=f'payment succeeded after {record.status}', now=now
                )

            try:
                if record.type == PaymentType.PRIMARY:
                    await self._issue_primary_tickets(uow, record, now=now)
                else:
                    await self._transfer_resold_ticket(uow, record, now=now)
            except _UNFULFILLABLE as e:
                # Drop the partial inventory change, keep the money trail
                await uow.rollback()
                return await self._flag_paid_but_unfulfilled(uow, record, reason=e.message, now=now)

            await uow.payment_record_repo.update(
                record=record.mark_succeeded(now=now), expected_version=record.version
            )
            await uow.commit()

        Logger.base.info(f'✅ [SETTLE] {record.id} {record.type} pending -> succeeded')
        return SettlementOutcome.APPLIED

    async def _issue_primary_tickets(
        self, uow: AbstractUnitOfWork, record: PaymentRecordEntity, *, now: datetime
    ) -> None:
        event = await uow.event_command_repo.get_by_id(event_id=record.event_id)
        if event is None:
            raise EventNotFoundError(record.event_id)

        # Same availability predicate as the check at intent creation
        updated = event.issue_tickets(tier_id=record.tier_id, quantity=record.quantity, now=now)
        await uow.event_command_repo.update_inventory(event=updated, expected_version=event.version)

        unit_price = unit_price_from_minor_units(record.amount, record.quantity)
        tickets = [
            TicketEntity.issue(
                event_id=event.id,
                owner_id=record.buyer_id,
                tier_id=record.tier_id,
                purchase_price=unit_price,
                currency=event.currency,
                expires_at=event.end_time,
                now=now,
            )
            for _ in range(record.quantity)
        ]
        await uow.ticket_command_repo.create_many(tickets=tickets)
        Logger.base.info(
            f'🎫 [SETTLE] {record.id} issued {record.quantity} ticket(s) of {event.id} '
            f'to {record.buyer_id}, {updated.tickets_remaining} remaining'
        )

    async def _transfer_resold_ticket(
        self, uow: AbstractUnitOfWork, record: PaymentRecordEntity, *, now: datetime
    ) -> None:
        ticket_id = record.ticket_id or ''
        ticket = await uow.ticket_command_repo.get_by_id(ticket_id=ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)

        reason = ticket.transfer_rejection_reason(
            buyer_id=record.buyer_id, seller_id=record.seller_id or '', now=now
        )
        if reason:
            raise FailedPreconditionError(reason)

        transferred = ticket.transfer_to(
            buyer_id=record.buyer_id, transfer_price=from_minor_units(record.amount), now=now
        )
        await uow.ticket_command_repo.update(ticket=transferred, expected_version=ticket.version)
        await uow.transfer_record_repo.append(
            transfer=TransferRecordEntity.record(
                ticket_id=ticket.id,
                event_id=ticket.event_id,
                from_user_id=ticket.owner_id,
                to_user_id=record.buyer_id,
                amount=record.amount,
                currency=record.currency,
                payment_reference_id=record.id,
                now=now,
            )
        )
        Logger.base.info(
            f'🔄 [SETTLE] {record.id} ticket {ticket.id} {ticket.owner_id} -> {record.buyer_id}'
        )

    async def _flag_paid_but_unfulfilled(
        self,
        uow: AbstractUnitOfWork,
        record: PaymentRecordEntity,
        *,
        reason: str,
        now: datetime,
    ) -> SettlementOutcome:
        await uow.payment_record_repo.update(
            record=record.mark_paid_but_unfulfilled(reason=reason, now=now),
            expected_version=record.version,
        )
        await uow.reconciliation_repo.append(
            entry=ReconciliationEntryEntity.open(
                payment_id=record.id, payment_type=record.type, reason=reason, now=now
            )
        )
        await uow.commit()

        metrics.record_reconciliation(payment_type=record.type.value)
        Logger.base.error(
            f'🚨 [SETTLE] {record.id} {record.type} paid but not fulfilled: {reason}'
        )
        return SettlementOutcome.NEEDS_RECONCILIATION

    async def _settle_failure(
        self, notification: PaymentFailed | PaymentCanceled
    ) -> SettlementOutcome:
        now = self.clock()
        target = (
            PaymentStatus.FAILED
            if isinstance(notification, PaymentFailed)
            else PaymentStatus.CANCELED
        )
        async with self.uow_factory() as uow:
            record = await self._load_record(uow, notification.transaction_id)
            if record.status == target:
                Logger.base.info(f'🔁 [SETTLE] {record.id} already {target}, duplicate')
                return SettlementOutcome.DUPLICATE
            if not record.status.can_transition_to(target):
                Logger.base.warning(
                    f'⏭️  [SETTLE] {record.id} {record.status} -> {target} ignored'
                )
                return SettlementOutcome.IGNORED

            if isinstance(notification, PaymentFailed):
                updated = record.mark_failed(reason=notification.reason, now=now)
            else:
                updated = record.mark_canceled(now=now)
            await uow.payment_record_repo.update(record=updated, expected_version=record.version)

            released = False
            if record.type == PaymentType.MARKETPLACE and record.ticket_id:
                released = await self._release_hold(uow, record, now=now)
            await uow.commit()

        Logger.base.info(
            f'❌ [SETTLE] {record.id} {record.type} pending -> {target}'
            f'{" (hold released)" if released else ""}'
        )
        return SettlementOutcome.APPLIED

    async def _release_hold(
        self, uow: AbstractUnitOfWork, record: PaymentRecordEntity, *, now: datetime
    ) -> bool:
        ticket = await uow.ticket_command_repo.get_by_id(ticket_id=record.ticket_id or '')
        if ticket is None:
            return False
        released = ticket.release_reservation(buyer_id=record.buyer_id, now=now)
        if released is None:
            return False
        await uow.ticket_command_repo.update(ticket=released, expected_version=ticket.version)
        return True

    async def _settle_refund(self, notification: ChargeRefunded) -> SettlementOutcome:
        now = self.clock()
        async with self.uow_factory() as uow:
            record = await self._load_record(uow, notification.transaction_id)
            if record.status == PaymentStatus.REFUNDED:
                Logger.base.info(f'🔁 [SETTLE] {record.id} already refunded, duplicate')
                return SettlementOutcome.DUPLICATE
            if not record.status.can_transition_to(PaymentStatus.REFUNDED):
                Logger.base.warning(f'⏭️  [SETTLE] {record.id} refund after {record.status} ignored')
                return SettlementOutcome.IGNORED

            tickets: list[TicketEntity] = []
            if record.status == PaymentStatus.PENDING or record.needs_reconciliation:
                # Nothing was delivered under this payment, the buyer's other tickets stay
                if record.type == PaymentType.MARKETPLACE:
                    await self._release_hold(uow, record, now=now)
            elif record.type == PaymentType.PRIMARY:
                tickets = await uow.ticket_command_repo.list_by_owner_and_event(
                    owner_id=record.buyer_id,
                    event_id=record.event_id,
                    states=TicketState.held_by_owner(),
                )
            else:
                tickets = await self._refunded_resale_tickets(uow, record)

            for ticket in tickets:
                await uow.ticket_command_repo.update(
                    ticket=ticket.revoke(now=now), expected_version=ticket.version
                )
            await uow.payment_record_repo.update(
                record=record.mark_refunded(now=now), expected_version=record.version
            )
            await uow.commit()

        # Counters are not restored and revoked resale tickets are not re-listed
        Logger.base.info(
            f'💸 [SETTLE] {record.id} {record.type} {record.status} -> refunded, '
            f'{len(tickets)} ticket(s) revoked'
        )
        return SettlementOutcome.APPLIED

    async def _refunded_resale_tickets(
        self, uow: AbstractUnitOfWork, record: PaymentRecordEntity
    ) -> list[TicketEntity]:
        ticket = await uow.ticket_command_repo.get_by_id(ticket_id=record.ticket_id or '')
        # Only revoked while the buyer still holds it
        if ticket is None or ticket.owner_id != record.buyer_id:
            return []
        if ticket.state == TicketState.REVOKED:
            return []
        return [ticket]
