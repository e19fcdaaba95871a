from datetime import datetime
from typing import List, Optional

import attrs
from uuid_utils import uuid7

from src.platform.exception.exceptions import InvalidArgumentError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.domain_error import (
    InventoryInvariantError,
    SoldOutError,
    TierNotFoundError,
    TierRequiredError,
    TierSoldOutError,
)
from src.service.ticketing.domain.value_object.pricing_tier import PricingTier


@attrs.define
class EventEntity:
    """
    Inventory counters of an event.

    Invariants (checked by ``validate_counters``):
    - tickets_remaining == capacity - tickets_issued
    - sum of tier remaining never exceeds tickets_remaining
    Aggregate and tier counters only ever change together, in ``issue_tickets``.
    """

    id: str
    name: str
    capacity: int
    tickets_issued: int = 0
    tickets_remaining: int = 0
    pricing_tiers: List[PricingTier] = attrs.field(factory=list)
    currency: str = 'CHF'
    end_time: Optional[datetime] = None
    version: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        name: str,
        capacity: int,
        pricing_tiers: List[PricingTier],
        now: datetime,
        currency: str = 'CHF',
        end_time: Optional[datetime] = None,
        id: Optional[str] = None,
    ) -> 'EventEntity':
        if capacity < 0:
            raise InvalidArgumentError('capacity must not be negative')
        event = cls(
            id=id or str(uuid7()),
            name=name,
            capacity=capacity,
            tickets_issued=0,
            tickets_remaining=capacity,
            pricing_tiers=list(pricing_tiers),
            currency=currency,
            end_time=end_time,
            created_at=now,
            updated_at=now,
        )
        event.validate_counters()
        return event

    def validate_counters(self) -> None:
        if self.tickets_remaining != self.capacity - self.tickets_issued:
            raise InventoryInvariantError(
                f'Event {self.id}: remaining {self.tickets_remaining} != '
                f'capacity {self.capacity} - issued {self.tickets_issued}'
            )
        if sum(tier.remaining for tier in self.pricing_tiers) > self.tickets_remaining:
            raise InventoryInvariantError(
                f'Event {self.id}: tier remaining exceeds event remaining'
            )

    @property
    def untiered_remaining(self) -> int:
        return self.tickets_remaining - sum(tier.remaining for tier in self.pricing_tiers)

    def find_tier(self, tier_id: str) -> Optional[PricingTier]:
        return next((tier for tier in self.pricing_tiers if tier.name == tier_id), None)

    def ensure_available(self, *, tier_id: Optional[str], quantity: int) -> Optional[PricingTier]:
        """Raise unless ``quantity`` tickets (of ``tier_id`` when given) can still be issued"""
        if quantity < 1:
            raise InvalidArgumentError('quantity must be at least 1')
        if self.tickets_remaining < quantity:
            raise SoldOutError(requested=quantity, remaining=self.tickets_remaining)
        if not tier_id:
            # Seats allotted to a tier are only sold through that tier
            if self.pricing_tiers and self.untiered_remaining < quantity:
                raise TierRequiredError(self.id)
            return None
        tier = self.find_tier(tier_id)
        if tier is None:
            raise TierNotFoundError(tier_id)
        if tier.remaining < quantity:
            raise TierSoldOutError(tier_id=tier_id, requested=quantity, remaining=tier.remaining)
        return tier

    @Logger.io
    def issue_tickets(
        self, *, tier_id: Optional[str], quantity: int, now: datetime
    ) -> 'EventEntity':
        tier = self.ensure_available(tier_id=tier_id, quantity=quantity)
        tiers = [
            existing.take(quantity) if tier is not None and existing.name == tier.name else existing
            for existing in self.pricing_tiers
        ]
        return attrs.evolve(
            self,
            tickets_issued=self.tickets_issued + quantity,
            tickets_remaining=self.tickets_remaining - quantity,
            pricing_tiers=tiers,
            version=self.version + 1,
            updated_at=now,
        )
