"""
Payment Record Repository Interface

Records are keyed by the gateway transaction id. Concurrent notifications about
the same transaction are serialized by the conditional ``update``.
"""

from abc import ABC, abstractmethod

from src.service.ticketing.domain.entity.payment_record_entity import PaymentRecordEntity


class IPaymentRecordRepo(ABC):
    @abstractmethod
    async def create(self, *, record: PaymentRecordEntity) -> PaymentRecordEntity:
        pass

    @abstractmethod
    async def get_by_id(self, *, payment_id: str) -> PaymentRecordEntity | None:
        pass

    @abstractmethod
    async def update(
        self, *, record: PaymentRecordEntity, expected_version: int
    ) -> PaymentRecordEntity:
        """
        Raises:
            ConcurrentModificationError: stored version differs from ``expected_version``
        """
        pass
