from decimal import ROUND_HALF_UP, Decimal


CENT = Decimal('0.01')


def to_minor_units(price: Decimal) -> int:
    """25.00 -> 2500; half-cent values round away from zero"""
    return int((price * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def unit_price_from_minor_units(amount: int, quantity: int) -> Decimal:
    """Per-ticket price in major units for a charge covering ``quantity`` tickets"""
    return (Decimal(amount) / 100 / quantity).quantize(CENT, rounding=ROUND_HALF_UP)


def from_minor_units(amount: int) -> Decimal:
    return (Decimal(amount) / 100).quantize(CENT)
