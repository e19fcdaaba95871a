from datetime import datetime

import attrs
from uuid_utils import uuid7


@attrs.frozen
class TransferRecordEntity:
    """Append-only audit row of one completed resale."""

    id: str
    ticket_id: str
    event_id: str
    from_user_id: str
    to_user_id: str
    amount: int  # minor units
    currency: str
    payment_reference_id: str
    created_at: datetime

    @classmethod
    def record(
        cls,
        *,
        ticket_id: str,
        event_id: str,
        from_user_id: str,
        to_user_id: str,
        amount: int,
        currency: str,
        payment_reference_id: str,
        now: datetime,
    ) -> 'TransferRecordEntity':
        return cls(
            id=str(uuid7()),
            ticket_id=ticket_id,
            event_id=event_id,
            from_user_id=from_user_id,
            to_user_id=to_user_id,
            amount=amount,
            currency=currency,
            payment_reference_id=payment_reference_id,
            created_at=now,
        )
