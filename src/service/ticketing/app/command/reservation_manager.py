from datetime import timedelta
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.clock.utc_clock import Clock, utc_now
from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.optimistic_retry import run_with_optimistic_retry
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import ForbiddenError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.ticketing.app.dto.reservation_result import ReservationResult
from src.service.ticketing.domain.domain_error import TicketNotFoundError


class ReservationManager:
    """
    Time-boxed holds on a single listed ticket.

    Each call is one read-modify-write Unit of Work guarded by the ticket
    version; a lost race re-reads and re-evaluates the rules. A hold is
    committed on its own, before any gateway call, so a failure afterwards
    leaves an expiring hold instead of a half-applied purchase.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        reservation_ttl: timedelta,
        max_retries: int,
        clock: Clock = utc_now,
    ) -> None:
        self.uow_factory = uow_factory
        self.reservation_ttl = reservation_ttl
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
            uow_factory=uow_factory,
            reservation_ttl=timedelta(seconds=settings.RESERVATION_TTL_SECONDS),
            max_retries=settings.RESERVATION_MAX_RETRIES,
            clock=clock,
        )

    @Logger.io
    async def reserve(self, *, ticket_id: str, buyer_id: str) -> ReservationResult:
        """
        Raises:
            TicketNotFoundError, NotListedError, InvalidPriceError,
            SelfPurchaseError, AlreadyReservedError
        """

        async def _reserve() -> ReservationResult:
            async with self.uow_factory() as uow:
                ticket = await uow.ticket_command_repo.get_by_id(ticket_id=ticket_id)
                if ticket is None:
                    raise TicketNotFoundError(ticket_id)

                reserved = ticket.reserve(
                    buyer_id=buyer_id, now=self.clock(), ttl=self.reservation_ttl
                )
                await uow.ticket_command_repo.update(
                    ticket=reserved, expected_version=ticket.version
                )
                await uow.commit()

            return ReservationResult(
                ticket_id=reserved.id,
                seller_id=reserved.owner_id,
                event_id=reserved.event_id,
                listing_price=reserved.listing_price,  # type: ignore[arg-type]
                currency=reserved.currency,
                reserved_until=reserved.reserved_until,  # type: ignore[arg-type]
            )

        try:
            result = await run_with_optimistic_retry(
                _reserve, max_attempts=self.max_retries, label=f'reserve {ticket_id}'
            )
        except Exception:
            metrics.record_reservation(result='rejected')
            raise

        metrics.record_reservation(result='reserved')
        Logger.base.info(
            f'🎟️  [RESERVE] ticket={ticket_id} buyer={buyer_id} until={result.reserved_until}'
        )
        return result

    @Logger.io
    async def release(self, *, ticket_id: str, buyer_id: str) -> bool:
        """
        Clear the hold if ``buyer_id`` placed it. Releasing a hold someone else
        owns, or a missing ticket, is a silent no-op.

        Returns:
            True when a hold was cleared
        """

        async def _release() -> bool:
            async with self.uow_factory() as uow:
                ticket = await uow.ticket_command_repo.get_by_id(ticket_id=ticket_id)
                if ticket is None:
                    return False
                released = ticket.release_reservation(buyer_id=buyer_id, now=self.clock())
                if released is None:
                    return False
                await uow.ticket_command_repo.update(
                    ticket=released, expected_version=ticket.version
                )
                await uow.commit()
                return True

        cleared = await run_with_optimistic_retry(
            _release, max_attempts=self.max_retries, label=f'release {ticket_id}'
        )
        if cleared:
            metrics.record_reservation(result='released')
            Logger.base.info(f'🔓 [RELEASE] ticket={ticket_id} buyer={buyer_id}')
        return cleared

    @Logger.io
    async def cancel_reservation(self, *, ticket_id: str, buyer_id: str) -> None:
        """
        Buyer-initiated release of their own hold.

        Raises:
            TicketNotFoundError: ticket does not exist
            ForbiddenError: the caller does not hold the reservation
        """
        async with self.uow_factory() as uow:
            ticket = await uow.ticket_command_repo.get_by_id(ticket_id=ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        if ticket.reserved_by != buyer_id:
            raise ForbiddenError('You do not have a reservation for this ticket')

        await self.release(ticket_id=ticket_id, buyer_id=buyer_id)
