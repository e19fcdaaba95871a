from decimal import Decimal
from typing import Any

import attrs


@attrs.frozen
class PricingTier:
    """A named price band of an event; the name doubles as the tier id."""

    name: str
    price: Decimal
    quantity: int
    remaining: int

    def take(self, quantity: int) -> 'PricingTier':
        return attrs.evolve(self, remaining=self.remaining - quantity)

    def to_dict(self) -> dict[str, Any]:
        return {
            'name': self.name,
            'price': str(self.price),
            'quantity': self.quantity,
            'remaining': self.remaining,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'PricingTier':
        quantity = int(data.get('quantity', 0))
        return cls(
            name=data['name'],
            price=Decimal(str(data.get('price', '0'))),
            quantity=quantity,
            remaining=int(data.get('remaining', quantity)),
        )
