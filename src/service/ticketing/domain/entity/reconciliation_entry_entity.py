from datetime import datetime
from typing import Optional

import attrs
from uuid_utils import uuid7

from src.service.ticketing.domain.enum.payment_type import PaymentType


@attrs.frozen
class ReconciliationEntryEntity:
    id: str
    payment_id: str
    payment_type: PaymentType
    reason: str
    created_at: datetime
    resolved_at: Optional[datetime] = None

    @classmethod
    def open(
        cls, *, payment_id: str, payment_type: PaymentType, reason: str, now: datetime
    ) -> 'ReconciliationEntryEntity':
        return cls(
            id=str(uuid7()),
            payment_id=payment_id,
            payment_type=payment_type,
            reason=reason,
            created_at=now,
        )
