from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import InvalidArgumentError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.entity.reconciliation_entry_entity import (
    ReconciliationEntryEntity,
)


class ListReconciliationEntriesUseCase:
    def __init__(self, *, uow_factory: UnitOfWorkFactory) -> None:
        self.uow_factory = uow_factory

    @classmethod
    @inject
    def depends(
        cls, uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory])
    ) -> Self:
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def execute(self, *, limit: int = 100) -> List[ReconciliationEntryEntity]:
        """Unresolved paid-but-unfulfilled payments, oldest first"""
        if limit < 1 or limit > 1000:
            raise InvalidArgumentError('limit must be between 1 and 1000')

        async with self.uow_factory() as uow:
            entries = await uow.reconciliation_repo.list_unresolved(limit=limit)

        Logger.base.info(f'📋 [RECONCILE] {len(entries)} unresolved entries')
        return entries
