"""
Ticket Command Repository Interface

Every state change is a conditional write on the ticket ``version``.
"""

from abc import ABC, abstractmethod
from typing import List

from src.service.ticketing.domain.entity.ticket_entity import TicketEntity
from src.service.ticketing.domain.enum.ticket_state import TicketState


class ITicketCommandRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, ticket_id: str) -> TicketEntity | None:
        pass

    @abstractmethod
    async def create_many(self, *, tickets: List[TicketEntity]) -> List[TicketEntity]:
        pass

    @abstractmethod
    async def update(self, *, ticket: TicketEntity, expected_version: int) -> TicketEntity:
        """
        Overwrite the mutable fields of the stored ticket with ``ticket``

        Raises:
            ConcurrentModificationError: stored version differs from ``expected_version``
        """
        pass

    @abstractmethod
    async def list_by_owner_and_event(
        self, *, owner_id: str, event_id: str, states: tuple[TicketState, ...]
    ) -> List[TicketEntity]:
        pass
