from datetime import datetime
from typing import Optional

import attrs


@attrs.define
class BuyerProfileEntity:
    user_id: str
    email: str = ''
    display_name: str = ''
    payer_reference: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def create_default(
        cls, *, user_id: str, now: datetime, email: str = '', display_name: str = ''
    ) -> 'BuyerProfileEntity':
        return cls(
            user_id=user_id,
            email=email,
            display_name=display_name,
            created_at=now,
            updated_at=now,
        )

    def with_payer_reference(self, payer_reference: str, *, now: datetime) -> 'BuyerProfileEntity':
        return attrs.evolve(self, payer_reference=payer_reference, updated_at=now)
