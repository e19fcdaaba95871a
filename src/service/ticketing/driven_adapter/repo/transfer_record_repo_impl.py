from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.clock.utc_clock import as_utc
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_transfer_record_repo import ITransferRecordRepo
from src.service.ticketing.domain.entity.transfer_record_entity import TransferRecordEntity
from src.service.ticketing.driven_adapter.model.transfer_record_model import TransferRecordModel


class TransferRecordRepoImpl(ITransferRecordRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def append(self, *, transfer: TransferRecordEntity) -> TransferRecordEntity:
        self.session.add(
            TransferRecordModel(
                id=transfer.id,
                ticket_id=transfer.ticket_id,
                event_id=transfer.event_id,
                from_user_id=transfer.from_user_id,
                to_user_id=transfer.to_user_id,
                amount=transfer.amount,
                currency=transfer.currency,
                payment_reference_id=transfer.payment_reference_id,
                created_at=transfer.created_at,
            )
        )
        await self.session.flush()
        return transfer

    @Logger.io
    async def list_by_ticket(self, *, ticket_id: str) -> List[TransferRecordEntity]:
        result = await self.session.execute(
            select(TransferRecordModel)
            .where(TransferRecordModel.ticket_id == ticket_id)
            .order_by(TransferRecordModel.created_at, TransferRecordModel.id)
        )
        return [
            TransferRecordEntity(
                id=model.id,
                ticket_id=model.ticket_id,
                event_id=model.event_id,
                from_user_id=model.from_user_id,
                to_user_id=model.to_user_id,
                amount=model.amount,
                currency=model.currency,
                payment_reference_id=model.payment_reference_id,
                created_at=as_utc(model.created_at),  # type: ignore[arg-type]
            )
            for model in result.scalars().all()
        ]
