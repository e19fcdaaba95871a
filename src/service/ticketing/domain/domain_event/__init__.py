"""Domain Events"""

from src.service.ticketing.domain.domain_event.payment_notification import (
    AccountUpdated,
    ChargeRefunded,
    PaymentCanceled,
    PaymentFailed,
    PaymentNotification,
    PaymentSucceeded,
    UnhandledNotification,
)

__all__ = [
    'AccountUpdated',
    'ChargeRefunded',
    'PaymentCanceled',
    'PaymentFailed',
    'PaymentNotification',
    'PaymentSucceeded',
    'UnhandledNotification',
]
