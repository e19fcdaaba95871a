"""
Unit of Work Pattern - one database session and its repositories per transaction

Architecture:
- UoW owns the session lifecycle and commit/rollback
- Repositories share the UoW session
- Use cases coordinate several repositories inside one UoW

Leaving the ``async with`` block without ``commit()`` rolls everything back.
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


if TYPE_CHECKING:
    from src.service.ticketing.app.interface.i_buyer_profile_repo import IBuyerProfileRepo
    from src.service.ticketing.app.interface.i_event_command_repo import IEventCommandRepo
    from src.service.ticketing.app.interface.i_payment_record_repo import IPaymentRecordRepo
    from src.service.ticketing.app.interface.i_reconciliation_repo import IReconciliationRepo
    from src.service.ticketing.app.interface.i_ticket_command_repo import ITicketCommandRepo
    from src.service.ticketing.app.interface.i_transfer_record_repo import ITransferRecordRepo


class AbstractUnitOfWork(abc.ABC):
    """
    Usage:
        async with uow_factory() as uow:
            ticket = await uow.ticket_command_repo.get_by_id(ticket_id=...)
            await uow.ticket_command_repo.update(ticket=..., expected_version=ticket.version)
            await uow.commit()
    """

    event_command_repo: IEventCommandRepo
    ticket_command_repo: ITicketCommandRepo
    payment_record_repo: IPaymentRecordRepo
    transfer_record_repo: ITransferRecordRepo
    reconciliation_repo: IReconciliationRepo
    buyer_profile_repo: IBuyerProfileRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        """Commit the transaction"""
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        """Discard everything written since the last commit; the UoW stays usable"""
        raise NotImplementedError


UnitOfWorkFactory = Callable[[], AbstractUnitOfWork]


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def __aenter__(self):
        from src.service.ticketing.driven_adapter.repo.buyer_profile_repo_impl import (
            BuyerProfileRepoImpl,
        )
        from src.service.ticketing.driven_adapter.repo.event_command_repo_impl import (
            EventCommandRepoImpl,
        )
        from src.service.ticketing.driven_adapter.repo.payment_record_repo_impl import (
            PaymentRecordRepoImpl,
        )
        from src.service.ticketing.driven_adapter.repo.reconciliation_repo_impl import (
            ReconciliationRepoImpl,
        )
        from src.service.ticketing.driven_adapter.repo.ticket_command_repo_impl import (
            TicketCommandRepoImpl,
        )
        from src.service.ticketing.driven_adapter.repo.transfer_record_repo_impl import (
            TransferRecordRepoImpl,
        )

        self.session = self._session_factory()
        self.event_command_repo = EventCommandRepoImpl(session=self.session)
        self.ticket_command_repo = TicketCommandRepoImpl(session=self.session)
        self.payment_record_repo = PaymentRecordRepoImpl(session=self.session)
        self.transfer_record_repo = TransferRecordRepoImpl(session=self.session)
        self.reconciliation_repo = ReconciliationRepoImpl(session=self.session)
        self.buyer_profile_repo = BuyerProfileRepoImpl(session=self.session)

        return await super().__aenter__()

    async def __aexit__(self, *args):
        try:
            await super().__aexit__(*args)
        finally:
            await self.session.close()

    async def _commit(self):
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


def sqlalchemy_uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> UnitOfWorkFactory:
    """Bind a session maker into a zero-argument UoW factory for the components"""

    def _create() -> AbstractUnitOfWork:
        return SqlAlchemyUnitOfWork(session_factory)

    return _create
