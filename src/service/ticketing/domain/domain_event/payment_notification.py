"""
Payment Gateway Notifications

The gateway adapter verifies and parses raw webhook deliveries into one of these
variants; the settlement processor dispatches on the variant with ``match``.
``notification_id`` is the gateway's delivery id and only serves logging, the
idempotency key is always ``transaction_id``.
"""

from typing import Optional, Union

import attrs


@attrs.frozen
class PaymentSucceeded:
    notification_id: str
    transaction_id: str


@attrs.frozen
class PaymentFailed:
    notification_id: str
    transaction_id: str
    reason: str = 'Unknown error'


@attrs.frozen
class PaymentCanceled:
    notification_id: str
    transaction_id: str


@attrs.frozen
class ChargeRefunded:
    notification_id: str
    transaction_id: str
    charge_id: Optional[str] = None


@attrs.frozen
class AccountUpdated:
    notification_id: str
    account_id: str
    details_submitted: bool = False
    charges_enabled: bool = False
    payouts_enabled: bool = False


@attrs.frozen
class UnhandledNotification:
    notification_id: str
    notification_type: str


PaymentNotification = Union[
    PaymentSucceeded,
    PaymentFailed,
    PaymentCanceled,
    ChargeRefunded,
    AccountUpdated,
    UnhandledNotification,
]
