from datetime import datetime
from typing import Optional

import attrs

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.enum.payment_status import PaymentStatus
from src.service.ticketing.domain.enum.payment_type import PaymentType


@attrs.define
class PaymentRecordEntity:
    """
    One gateway transaction. ``id`` is the gateway transaction id and the
    idempotency key of every notification about it.
    """

    id: str
    type: PaymentType
    buyer_id: str
    event_id: str
    amount: int  # minor units
    currency: str
    status: PaymentStatus = PaymentStatus.PENDING
    ticket_id: Optional[str] = None
    seller_id: Optional[str] = None
    tier_id: Optional[str] = None
    quantity: int = 1
    failure_reason: Optional[str] = None
    needs_reconciliation: bool = False
    reconciliation_reason: Optional[str] = None
    reserved_until: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: int = 1

    @classmethod
    def create_primary(
        cls,
        *,
        transaction_id: str,
        buyer_id: str,
        event_id: str,
        tier_id: Optional[str],
        quantity: int,
        amount: int,
        currency: str,
        now: datetime,
    ) -> 'PaymentRecordEntity':
        return cls(
            id=transaction_id,
            type=PaymentType.PRIMARY,
            buyer_id=buyer_id,
            event_id=event_id,
            tier_id=tier_id,
            quantity=quantity,
            amount=amount,
            currency=currency,
            created_at=now,
            updated_at=now,
        )

    @classmethod
    def create_marketplace(
        cls,
        *,
        transaction_id: str,
        buyer_id: str,
        seller_id: str,
        event_id: str,
        ticket_id: str,
        amount: int,
        currency: str,
        reserved_until: Optional[datetime],
        now: datetime,
    ) -> 'PaymentRecordEntity':
        return cls(
            id=transaction_id,
            type=PaymentType.MARKETPLACE,
            buyer_id=buyer_id,
            seller_id=seller_id,
            event_id=event_id,
            ticket_id=ticket_id,
            quantity=1,
            amount=amount,
            currency=currency,
            reserved_until=reserved_until,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_terminal_failure(self) -> bool:
        return self.status in (PaymentStatus.FAILED, PaymentStatus.CANCELED)

    def _move_to(self, target: PaymentStatus, now: datetime, **changes) -> 'PaymentRecordEntity':
        if not self.status.can_transition_to(target):
            raise ValueError(f'Payment {self.id}: {self.status} -> {target} is not allowed')
        return attrs.evolve(
            self, status=target, version=self.version + 1, updated_at=now, **changes
        )

    @Logger.io
    def mark_succeeded(self, *, now: datetime) -> 'PaymentRecordEntity':
        return self._move_to(PaymentStatus.SUCCEEDED, now)

    @Logger.io
    def mark_failed(self, *, reason: str, now: datetime) -> 'PaymentRecordEntity':
        return self._move_to(PaymentStatus.FAILED, now, failure_reason=reason)

    @Logger.io
    def mark_canceled(self, *, now: datetime) -> 'PaymentRecordEntity':
        return self._move_to(PaymentStatus.CANCELED, now)

    @Logger.io
    def mark_refunded(self, *, now: datetime) -> 'PaymentRecordEntity':
        return self._move_to(PaymentStatus.REFUNDED, now)

    @Logger.io
    def mark_paid_but_unfulfilled(self, *, reason: str, now: datetime) -> 'PaymentRecordEntity':
        """
        Money moved but the inventory change could not be applied.

        Also accepted from failed/canceled: a success reported after a failure is
        still money received and is never dropped.
        """
        return attrs.evolve(
            self,
            status=PaymentStatus.SUCCEEDED,
            needs_reconciliation=True,
            reconciliation_reason=reason,
            version=self.version + 1,
            updated_at=now,
        )
