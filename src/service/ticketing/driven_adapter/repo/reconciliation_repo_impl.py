from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.clock.utc_clock import as_utc
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_reconciliation_repo import IReconciliationRepo
from src.service.ticketing.domain.entity.reconciliation_entry_entity import (
    ReconciliationEntryEntity,
)
from src.service.ticketing.domain.enum.payment_type import PaymentType
from src.service.ticketing.driven_adapter.model.reconciliation_entry_model import (
    ReconciliationEntryModel,
)


class ReconciliationRepoImpl(IReconciliationRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def append(self, *, entry: ReconciliationEntryEntity) -> ReconciliationEntryEntity:
        self.session.add(
            ReconciliationEntryModel(
                id=entry.id,
                payment_id=entry.payment_id,
                payment_type=entry.payment_type.value,
                reason=entry.reason,
                created_at=entry.created_at,
                resolved_at=entry.resolved_at,
            )
        )
        await self.session.flush()
        return entry

    @Logger.io
    async def list_unresolved(self, *, limit: int = 100) -> List[ReconciliationEntryEntity]:
        result = await self.session.execute(
            select(ReconciliationEntryModel)
            .where(ReconciliationEntryModel.resolved_at.is_(None))
            .order_by(ReconciliationEntryModel.created_at, ReconciliationEntryModel.id)
            .limit(limit)
        )
        return [
            ReconciliationEntryEntity(
                id=model.id,
                payment_id=model.payment_id,
                payment_type=PaymentType(model.payment_type),
                reason=model.reason,
                created_at=as_utc(model.created_at),  # type: ignore[arg-type]
                resolved_at=as_utc(model.resolved_at),
            )
            for model in result.scalars().all()
        ]
