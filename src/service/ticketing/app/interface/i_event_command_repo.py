"""
Event Command Repository Interface

Reads and conditionally rewrites the inventory counters of an event.
"""

from abc import ABC, abstractmethod

from src.service.ticketing.domain.entity.event_entity import EventEntity


class IEventCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, event: EventEntity) -> EventEntity:
        pass

    @abstractmethod
    async def get_by_id(self, *, event_id: str) -> EventEntity | None:
        pass

    @abstractmethod
    async def update_inventory(self, *, event: EventEntity, expected_version: int) -> EventEntity:
        """
        Persist ``tickets_issued``, ``tickets_remaining`` and the tier counters of
        ``event`` in a single write, only if the stored row still carries
        ``expected_version``.

        Raises:
            ConcurrentModificationError: another writer changed the row first
        """
        pass
