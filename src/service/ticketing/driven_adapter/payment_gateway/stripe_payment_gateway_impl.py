"""
Stripe Payment Gateway Implementation

The stripe SDK is synchronous; every outbound call runs in a worker thread so the
event loop keeps serving requests. The API key is passed per call instead of
through the module-global ``stripe.api_key``, so several gateway instances (with
different keys) can coexist in one process.
"""

from functools import partial
from typing import Any, Mapping, Optional

import anyio
import orjson
import stripe
from pydantic import SecretStr

from src.platform.exception.exceptions import InvalidArgumentError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_payment_gateway import (
    GatewayTransaction,
    IPaymentGateway,
)
from src.service.ticketing.domain.domain_error import (
    InvalidSignatureError,
    PaymentDeclinedError,
    PaymentGatewayError,
    WebhookNotConfiguredError,
)
from src.service.ticketing.domain.domain_event.payment_notification import (
    AccountUpdated,
    ChargeRefunded,
    PaymentCanceled,
    PaymentFailed,
    PaymentNotification,
    PaymentSucceeded,
    UnhandledNotification,
)


def map_gateway_event(event: Mapping[str, Any]) -> PaymentNotification:
    """Translate a verified Stripe event into a notification variant"""
    event_id = str(event.get('id', ''))
    event_type = str(event.get('type', ''))
    obj: Mapping[str, Any] = (event.get('data') or {}).get('object') or {}

    match event_type:
        case 'payment_intent.succeeded':
            return PaymentSucceeded(notification_id=event_id, transaction_id=obj['id'])
        case 'payment_intent.payment_failed':
            last_error = obj.get('last_payment_error') or {}
            return PaymentFailed(
                notification_id=event_id,
                transaction_id=obj['id'],
                reason=last_error.get('message') or 'Unknown error',
            )
        case 'payment_intent.canceled':
            return PaymentCanceled(notification_id=event_id, transaction_id=obj['id'])
        case 'charge.refunded':
            # Refunds arrive on the charge; the record is keyed by its payment intent
            payment_intent = obj.get('payment_intent')
            if not payment_intent:
                return UnhandledNotification(
                    notification_id=event_id, notification_type=event_type
                )
            return ChargeRefunded(
                notification_id=event_id, transaction_id=payment_intent, charge_id=obj.get('id')
            )
        case 'account.updated':
            return AccountUpdated(
                notification_id=event_id,
                account_id=obj.get('id', ''),
                details_submitted=bool(obj.get('details_submitted')),
                charges_enabled=bool(obj.get('charges_enabled')),
                payouts_enabled=bool(obj.get('payouts_enabled')),
            )
        case _:
            return UnhandledNotification(notification_id=event_id, notification_type=event_type)


class StripePaymentGatewayImpl(IPaymentGateway):
    def __init__(self, *, api_key: SecretStr, webhook_secret: SecretStr) -> None:
        self._api_key = api_key
        self._webhook_secret = webhook_secret

    def _require_api_key(self) -> str:
        api_key = self._api_key.get_secret_value()
        if not api_key:
            raise PaymentGatewayError('Payment gateway is not configured')
        return api_key

    @staticmethod
    def _translate_error(error: stripe.StripeError, action: str) -> Exception:
        if isinstance(error, stripe.CardError):
            return PaymentDeclinedError(error.user_message or 'Payment was declined')
        Logger.base.error(f'💥 [STRIPE] {action} failed: {error}')
        return PaymentGatewayError(f'Failed to {action}')

    @Logger.io
    async def create_payer_account(self, *, user_id: str, email: str, display_name: str) -> str:
        api_key = self._require_api_key()
        try:
            customer = await anyio.to_thread.run_sync(
                partial(
                    stripe.Customer.create,
                    api_key=api_key,
                    email=email or None,
                    name=display_name or None,
                    metadata={'user_id': user_id, 'email': email, 'name': display_name},
                )
            )
        except stripe.StripeError as e:
            raise self._translate_error(e, 'create customer') from e

        Logger.base.info(f'👤 [STRIPE] customer {customer.id} for user={user_id}')
        return customer.id

    @Logger.io
    async def create_payment_transaction(
        self,
        *,
        amount: int,
        currency: str,
        payer_reference: str,
        metadata: Mapping[str, str],
        description: Optional[str] = None,
    ) -> GatewayTransaction:
        api_key = self._require_api_key()
        try:
            intent = await anyio.to_thread.run_sync(
                partial(
                    stripe.PaymentIntent.create,
                    api_key=api_key,
                    amount=amount,
                    currency=currency,
                    customer=payer_reference,
                    metadata=dict(metadata),
                    description=description,
                    automatic_payment_methods={'enabled': True},
                )
            )
        except stripe.StripeError as e:
            raise self._translate_error(e, 'create payment intent') from e

        Logger.base.info(f'💳 [STRIPE] payment intent {intent.id} amount={amount} {currency}')
        return GatewayTransaction(transaction_id=intent.id, client_secret=intent.client_secret)

    @Logger.io
    def construct_notification(self, *, payload: bytes, signature: str) -> PaymentNotification:
        secret = self._webhook_secret.get_secret_value()
        if not secret:
            raise WebhookNotConfiguredError()
        if not signature:
            raise InvalidSignatureError('Missing stripe-signature header')

        try:
            stripe.WebhookSignature.verify_header(payload.decode('utf-8'), signature, secret)
        except (stripe.SignatureVerificationError, UnicodeDecodeError) as e:
            raise InvalidSignatureError(f'Webhook signature verification failed: {e}') from e

        try:
            event = orjson.loads(payload)
        except orjson.JSONDecodeError as e:
            raise InvalidArgumentError('Invalid webhook payload') from e
        if not isinstance(event, dict):
            raise InvalidArgumentError('Invalid webhook payload')

        try:
            notification = map_gateway_event(event)
        except KeyError as e:
            raise InvalidArgumentError(f'Webhook payload is missing {e}') from e

        Logger.base.info(f'📨 [STRIPE] {event.get("type")} {event.get("id")} verified')
        return notification
