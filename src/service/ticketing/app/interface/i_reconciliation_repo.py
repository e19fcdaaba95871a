from abc import ABC, abstractmethod
from typing import List

from src.service.ticketing.domain.entity.reconciliation_entry_entity import (
    ReconciliationEntryEntity,
)


class IReconciliationRepo(ABC):
    """Queue of payments where money moved but the inventory change was not applied."""

    @abstractmethod
    async def append(self, *, entry: ReconciliationEntryEntity) -> ReconciliationEntryEntity:
        pass

    @abstractmethod
    async def list_unresolved(self, *, limit: int = 100) -> List[ReconciliationEntryEntity]:
        """Oldest first"""
        pass
