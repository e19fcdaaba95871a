from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.clock.utc_clock import as_utc
from src.platform.exception.exceptions import ConcurrentModificationError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_payment_record_repo import IPaymentRecordRepo
from src.service.ticketing.domain.entity.payment_record_entity import PaymentRecordEntity
from src.service.ticketing.domain.enum.payment_status import PaymentStatus
from src.service.ticketing.domain.enum.payment_type import PaymentType
from src.service.ticketing.driven_adapter.model.payment_record_model import PaymentRecordModel


class PaymentRecordRepoImpl(IPaymentRecordRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_entity(model: PaymentRecordModel) -> PaymentRecordEntity:
        return PaymentRecordEntity(
            id=model.id,
            type=PaymentType(model.type),
            buyer_id=model.buyer_id,
            event_id=model.event_id,
            amount=model.amount,
            currency=model.currency,
            status=PaymentStatus(model.status),
            ticket_id=model.ticket_id,
            seller_id=model.seller_id,
            tier_id=model.tier_id,
            quantity=model.quantity,
            failure_reason=model.failure_reason,
            needs_reconciliation=model.needs_reconciliation,
            reconciliation_reason=model.reconciliation_reason,
            reserved_until=as_utc(model.reserved_until),
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
            version=model.version,
        )

    @Logger.io
    async def create(self, *, record: PaymentRecordEntity) -> PaymentRecordEntity:
        self.session.add(
            PaymentRecordModel(
                id=record.id,
                type=record.type.value,
                buyer_id=record.buyer_id,
                event_id=record.event_id,
                ticket_id=record.ticket_id,
                seller_id=record.seller_id,
                tier_id=record.tier_id,
                quantity=record.quantity,
                amount=record.amount,
                currency=record.currency,
                status=record.status.value,
                failure_reason=record.failure_reason,
                needs_reconciliation=record.needs_reconciliation,
                reconciliation_reason=record.reconciliation_reason,
                reserved_until=record.reserved_until,
                created_at=record.created_at,
                updated_at=record.updated_at,
                version=record.version,
            )
        )
        await self.session.flush()
        return record

    @Logger.io
    async def get_by_id(self, *, payment_id: str) -> PaymentRecordEntity | None:
        result = await self.session.execute(
            select(PaymentRecordModel).where(PaymentRecordModel.id == payment_id)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    @Logger.io
    async def update(
        self, *, record: PaymentRecordEntity, expected_version: int
    ) -> PaymentRecordEntity:
        result = await self.session.execute(
            update(PaymentRecordModel)
            .where(
                PaymentRecordModel.id == record.id,
                PaymentRecordModel.version == expected_version,
            )
            .values(
                status=record.status.value,
                failure_reason=record.failure_reason,
                needs_reconciliation=record.needs_reconciliation,
                reconciliation_reason=record.reconciliation_reason,
                updated_at=record.updated_at,
                version=record.version,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConcurrentModificationError(
                f'Payment {record.id} changed since version {expected_version}'
            )
        return record
