from decimal import Decimal
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.clock.utc_clock import Clock, utc_now
from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.optimistic_retry import run_with_optimistic_retry
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import InvalidArgumentError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.ledger_snapshot import LedgerSnapshot
from src.service.ticketing.domain.domain_error import EventNotFoundError, TicketNotFoundError
from src.service.ticketing.domain.entity.ticket_entity import TicketEntity


class InventoryLedger:
    """
    Availability checks and owner-side listing changes.

    The primary-purchase check is read-only: nothing is decremented until the
    payment settles, where the same predicate runs again inside the settlement
    transaction. Two buyers racing for the last ticket are therefore decided at
    settlement, and the loser is queued for reconciliation.
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
            uow_factory=uow_factory, max_retries=settings.RESERVATION_MAX_RETRIES, clock=clock
        )

    @Logger.io
    async def check_availability_for_primary_purchase(
        self, *, event_id: str, tier_id: Optional[str], quantity: int
    ) -> LedgerSnapshot:
        """
        Raises:
            InvalidArgumentError: quantity < 1
            EventNotFoundError, SoldOutError, TierNotFoundError, TierSoldOutError
            TierRequiredError: no tier given and too few seats outside the pricing tiers
        """
        if quantity < 1:
            raise InvalidArgumentError('quantity must be at least 1')

        async with self.uow_factory() as uow:
            event = await uow.event_command_repo.get_by_id(event_id=event_id)
        if event is None:
            raise EventNotFoundError(event_id)

        tier = event.ensure_available(tier_id=tier_id, quantity=quantity)
        return LedgerSnapshot(
            event_id=event.id,
            event_name=event.name,
            currency=event.currency,
            quantity=quantity,
            tickets_remaining=event.tickets_remaining,
            tier_id=tier.name if tier else None,
            tier_remaining=tier.remaining if tier else None,
            unit_price=tier.price if tier else None,
        )

    @Logger.io
    async def list_ticket_for_resale(
        self, *, ticket_id: str, owner_id: str, listing_price: Decimal
    ) -> TicketEntity:
        """
        Raises:
            TicketNotFoundError, ForbiddenError, NotListableError, InvalidPriceError
        """

        async def _list() -> TicketEntity:
            async with self.uow_factory() as uow:
                ticket = await uow.ticket_command_repo.get_by_id(ticket_id=ticket_id)
                if ticket is None:
                    raise TicketNotFoundError(ticket_id)
                listed = ticket.list_for_resale(
                    owner_id=owner_id, listing_price=listing_price, now=self.clock()
                )
                await uow.ticket_command_repo.update(ticket=listed, expected_version=ticket.version)
                await uow.commit()
                return listed

        listed = await run_with_optimistic_retry(
            _list, max_attempts=self.max_retries, label=f'list {ticket_id}'
        )
        Logger.base.info(f'🏷️  [LISTING] ticket={ticket_id} listed at {listing_price}')
        return listed

    @Logger.io
    async def cancel_listing(self, *, ticket_id: str, owner_id: str) -> TicketEntity:
        """
        Withdraw a listing. Refused while a buyer holds a live reservation, since
        that buyer may already be paying.

        Raises:
            TicketNotFoundError, ForbiddenError, NotListedError, AlreadyReservedError
        """

        async def _cancel() -> TicketEntity:
            async with self.uow_factory() as uow:
                ticket = await uow.ticket_command_repo.get_by_id(ticket_id=ticket_id)
                if ticket is None:
                    raise TicketNotFoundError(ticket_id)
                withdrawn = ticket.cancel_listing(owner_id=owner_id, now=self.clock())
                await uow.ticket_command_repo.update(
                    ticket=withdrawn, expected_version=ticket.version
                )
                await uow.commit()
                return withdrawn

        withdrawn = await run_with_optimistic_retry(
            _cancel, max_attempts=self.max_retries, label=f'unlist {ticket_id}'
        )
        Logger.base.info(f'🏷️  [LISTING] ticket={ticket_id} withdrawn -> {withdrawn.state}')
        return withdrawn
