"""
Ticketing failures, grouped under the platform error taxonomy so the HTTP layer
maps them to status codes without knowing about them.
"""

from src.platform.exception.exceptions import (
    CustomBaseError,
    FailedPreconditionError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
)


class InvalidAmountError(InvalidArgumentError):
    pass


class EventNotFoundError(NotFoundError):
    def __init__(self, event_id: str) -> None:
        super().__init__(f'Event {event_id} not found')


class TierNotFoundError(NotFoundError):
    def __init__(self, tier_id: str) -> None:
        super().__init__(f'Pricing tier {tier_id} not found')


class TicketNotFoundError(NotFoundError):
    def __init__(self, ticket_id: str) -> None:
        super().__init__(f'Ticket {ticket_id} not found')


class SoldOutError(FailedPreconditionError):
    def __init__(self, *, requested: int, remaining: int) -> None:
        super().__init__(f'Only {remaining} tickets remaining, {requested} requested')


class TierSoldOutError(FailedPreconditionError):
    def __init__(self, *, tier_id: str, requested: int, remaining: int) -> None:
        super().__init__(f'Only {remaining} tickets remaining in {tier_id}, {requested} requested')


class TierRequiredError(InvalidArgumentError):
    def __init__(self, event_id: str) -> None:
        super().__init__(f'Event {event_id} is sold by pricing tier, tier_id is required')


class InventoryInvariantError(InternalError):
    """Stored counters would break the event's inventory invariants if written."""


class NotListedError(FailedPreconditionError):
    def __init__(self, ticket_id: str) -> None:
        super().__init__(f'Ticket {ticket_id} is not available for purchase')


class NotListableError(FailedPreconditionError):
    pass


class InvalidPriceError(FailedPreconditionError):
    def __init__(self, message: str = 'Invalid ticket price') -> None:
        super().__init__(message)


class SelfPurchaseError(FailedPreconditionError):
    def __init__(self) -> None:
        super().__init__('Cannot purchase your own ticket')


class AlreadyReservedError(FailedPreconditionError):
    def __init__(self, ticket_id: str) -> None:
        super().__init__(f'Ticket {ticket_id} is currently reserved by another buyer')


class InvalidSignatureError(FailedPreconditionError):
    """Notification signature missing or not verifiable; never retried."""

    def __init__(self, message: str = 'Invalid signature') -> None:
        super().__init__(message, 400)


class PaymentDeclinedError(FailedPreconditionError):
    pass


class PaymentGatewayError(InternalError):
    pass


class WebhookNotConfiguredError(InternalError):
    def __init__(self) -> None:
        super().__init__('Webhook secret not configured')


class UnknownTransactionError(CustomBaseError):
    """No payment record (yet) for a notified transaction; 503 so the gateway redelivers."""

    def __init__(self, transaction_id: str) -> None:
        super().__init__(f'No payment record for transaction {transaction_id}', 503)
