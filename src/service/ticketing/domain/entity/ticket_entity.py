from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

import attrs
from uuid_utils import uuid7

from src.platform.exception.exceptions import ForbiddenError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.domain_error import (
    AlreadyReservedError,
    InvalidPriceError,
    NotListableError,
    NotListedError,
    SelfPurchaseError,
)
from src.service.ticketing.domain.enum.ticket_state import TicketState


_RESALE_CLEARED = {
    'listing_price': None,
    'listed_at': None,
    'reserved_by': None,
    'reserved_until': None,
}


@attrs.define
class TicketEntity:
    id: str
    event_id: str
    owner_id: str
    purchase_price: Decimal
    state: TicketState = TicketState.ISSUED
    tier_id: Optional[str] = None
    currency: str = 'CHF'
    issued_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    transfer_lock: bool = False
    listing_price: Optional[Decimal] = None
    listed_at: Optional[datetime] = None
    reserved_by: Optional[str] = None
    reserved_until: Optional[datetime] = None
    previous_owner_id: Optional[str] = None
    transfer_price: Optional[Decimal] = None
    version: int = 1
    updated_at: Optional[datetime] = None

    @classmethod
    def issue(
        cls,
        *,
        event_id: str,
        owner_id: str,
        tier_id: Optional[str],
        purchase_price: Decimal,
        currency: str,
        expires_at: Optional[datetime],
        now: datetime,
    ) -> 'TicketEntity':
        return cls(
            id=str(uuid7()),
            event_id=event_id,
            owner_id=owner_id,
            tier_id=tier_id,
            purchase_price=purchase_price,
            currency=currency,
            state=TicketState.ISSUED,
            issued_at=now,
            expires_at=expires_at,
            updated_at=now,
        )

    def has_active_reservation(self, now: datetime) -> bool:
        return (
            self.reserved_by is not None
            and self.reserved_until is not None
            and self.reserved_until > now
        )

    def is_reserved_by_other(self, buyer_id: str, now: datetime) -> bool:
        return self.has_active_reservation(now) and self.reserved_by != buyer_id

    def _evolve(self, now: datetime, **changes) -> 'TicketEntity':
        return attrs.evolve(self, version=self.version + 1, updated_at=now, **changes)

    @Logger.io
    def reserve(self, *, buyer_id: str, now: datetime, ttl: timedelta) -> 'TicketEntity':
        """
        Place or refresh a hold for ``buyer_id``.

        An expired hold of another buyer is superseded; there is no sweeper, a
        hold simply stops counting once ``reserved_until`` has passed.
        """
        if self.state != TicketState.LISTED:
            raise NotListedError(self.id)
        if self.listing_price is None or self.listing_price <= 0:
            raise InvalidPriceError()
        if self.owner_id == buyer_id:
            raise SelfPurchaseError()
        if self.is_reserved_by_other(buyer_id, now):
            raise AlreadyReservedError(self.id)
        return self._evolve(now, reserved_by=buyer_id, reserved_until=now + ttl)

    def release_reservation(self, *, buyer_id: str, now: datetime) -> Optional['TicketEntity']:
        """The released ticket, or None when ``buyer_id`` holds nothing to release"""
        if self.reserved_by != buyer_id:
            return None
        return self._evolve(now, reserved_by=None, reserved_until=None)

    @Logger.io
    def list_for_resale(
        self, *, owner_id: str, listing_price: Decimal, now: datetime
    ) -> 'TicketEntity':
        if self.owner_id != owner_id:
            raise ForbiddenError('Only the ticket owner can list it')
        if self.state not in (TicketState.ISSUED, TicketState.TRANSFERRED):
            raise NotListableError(f'Ticket {self.id} cannot be listed while {self.state}')
        if self.transfer_lock:
            raise NotListableError(f'Ticket {self.id} is locked for transfer')
        if listing_price <= 0:
            raise InvalidPriceError('Listing price must be positive')
        return self._evolve(
            now,
            state=TicketState.LISTED,
            listing_price=listing_price,
            listed_at=now,
            reserved_by=None,
            reserved_until=None,
        )

    @Logger.io
    def cancel_listing(self, *, owner_id: str, now: datetime) -> 'TicketEntity':
        if self.owner_id != owner_id:
            raise ForbiddenError('Only the ticket owner can withdraw its listing')
        if self.state != TicketState.LISTED:
            raise NotListedError(self.id)
        if self.has_active_reservation(now):
            raise AlreadyReservedError(self.id)
        restored = TicketState.TRANSFERRED if self.previous_owner_id else TicketState.ISSUED
        return self._evolve(now, state=restored, **_RESALE_CLEARED)

    def transfer_rejection_reason(
        self, *, buyer_id: str, seller_id: str, now: datetime
    ) -> Optional[str]:
        """Why a paid resale can no longer be applied, or None when it can"""
        if self.state != TicketState.LISTED:
            return f'ticket {self.id} is {self.state}, not listed'
        if self.owner_id != seller_id:
            return f'ticket {self.id} is no longer owned by seller {seller_id}'
        if self.is_reserved_by_other(buyer_id, now):
            return f'ticket {self.id} is reserved by another buyer'
        return None

    @Logger.io
    def transfer_to(
        self, *, buyer_id: str, transfer_price: Decimal, now: datetime
    ) -> 'TicketEntity':
        return self._evolve(
            now,
            state=TicketState.TRANSFERRED,
            owner_id=buyer_id,
            previous_owner_id=self.owner_id,
            transfer_price=transfer_price,
            **_RESALE_CLEARED,
        )

    @Logger.io
    def revoke(self, *, now: datetime) -> 'TicketEntity':
        return self._evolve(now, state=TicketState.REVOKED, **_RESALE_CLEARED)
