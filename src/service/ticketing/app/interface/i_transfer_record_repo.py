from abc import ABC, abstractmethod
from typing import List

from src.service.ticketing.domain.entity.transfer_record_entity import TransferRecordEntity


class ITransferRecordRepo(ABC):
    """Append-only: rows are never updated or deleted."""

    @abstractmethod
    async def append(self, *, transfer: TransferRecordEntity) -> TransferRecordEntity:
        pass

    @abstractmethod
    async def list_by_ticket(self, *, ticket_id: str) -> List[TransferRecordEntity]:
        pass
