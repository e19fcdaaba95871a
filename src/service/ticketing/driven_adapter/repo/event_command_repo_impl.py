"""
Event Command Repository Implementation

Inventory counters are written with a single conditional UPDATE guarded by the
row version, so aggregate and tier counters can never diverge.
"""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.clock.utc_clock import as_utc
from src.platform.exception.exceptions import ConcurrentModificationError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_event_command_repo import IEventCommandRepo
from src.service.ticketing.domain.entity.event_entity import EventEntity
from src.service.ticketing.domain.value_object.pricing_tier import PricingTier
from src.service.ticketing.driven_adapter.model.event_model import EventModel


class EventCommandRepoImpl(IEventCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_entity(model: EventModel) -> EventEntity:
        return EventEntity(
            id=model.id,
            name=model.name,
            capacity=model.capacity,
            tickets_issued=model.tickets_issued,
            tickets_remaining=model.tickets_remaining,
            pricing_tiers=[PricingTier.from_dict(tier) for tier in model.pricing_tiers or []],
            currency=model.currency,
            end_time=as_utc(model.end_time),
            version=model.version,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )

    @Logger.io
    async def create(self, *, event: EventEntity) -> EventEntity:
        model = EventModel(
            id=event.id,
            name=event.name,
            capacity=event.capacity,
            tickets_issued=event.tickets_issued,
            tickets_remaining=event.tickets_remaining,
            pricing_tiers=[tier.to_dict() for tier in event.pricing_tiers],
            currency=event.currency,
            end_time=event.end_time,
            version=event.version,
            created_at=event.created_at,
            updated_at=event.updated_at,
        )
        self.session.add(model)
        await self.session.flush()
        return event

    @Logger.io
    async def get_by_id(self, *, event_id: str) -> EventEntity | None:
        result = await self.session.execute(select(EventModel).where(EventModel.id == event_id))
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    @Logger.io
    async def update_inventory(self, *, event: EventEntity, expected_version: int) -> EventEntity:
        event.validate_counters()
        result = await self.session.execute(
            update(EventModel)
            .where(EventModel.id == event.id, EventModel.version == expected_version)
            .values(
                tickets_issued=event.tickets_issued,
                tickets_remaining=event.tickets_remaining,
                pricing_tiers=[tier.to_dict() for tier in event.pricing_tiers],
                version=event.version,
                updated_at=event.updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConcurrentModificationError(
                f'Event {event.id} changed since version {expected_version}'
            )
        return event
