"""
Payment Gateway Port

Outbound calls (payer accounts, payment transactions) and inbound notification
verification. Implementations raise:
- PaymentDeclinedError for card-type rejections
- PaymentGatewayError for every other gateway failure
- InvalidSignatureError when a notification cannot be verified
"""

from abc import ABC, abstractmethod
from typing import Mapping, Optional

import attrs

from src.service.ticketing.domain.domain_event.payment_notification import PaymentNotification


@attrs.frozen
class GatewayTransaction:
    transaction_id: str
    client_secret: str


class IPaymentGateway(ABC):
    @abstractmethod
    async def create_payer_account(
        self, *, user_id: str, email: str, display_name: str
    ) -> str:
        """
        Returns:
            The gateway's payer (customer) reference
        """
        pass

    @abstractmethod
    async def create_payment_transaction(
        self,
        *,
        amount: int,
        currency: str,
        payer_reference: str,
        metadata: Mapping[str, str],
        description: Optional[str] = None,
    ) -> GatewayTransaction:
        pass

    @abstractmethod
    def construct_notification(self, *, payload: bytes, signature: str) -> PaymentNotification:
        """Verify ``signature`` over the raw ``payload`` before parsing anything"""
        pass
