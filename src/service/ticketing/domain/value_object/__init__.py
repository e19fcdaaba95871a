"""Ticketing Domain Value Objects"""

from src.service.ticketing.domain.value_object.pricing_tier import PricingTier

__all__ = ['PricingTier']
