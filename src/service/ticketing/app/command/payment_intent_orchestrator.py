from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.clock.utc_clock import Clock, utc_now
from src.platform.config.core_setting import Settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import UnitOfWorkFactory
from src.platform.exception.exceptions import (
    CustomBaseError,
    InternalError,
    InvalidArgumentError,
    UnauthenticatedError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ticketing_metrics import metrics
from src.service.ticketing.app.command.inventory_ledger import InventoryLedger
from src.service.ticketing.app.command.reservation_manager import ReservationManager
from src.service.ticketing.app.dto.payment_intent_result import (
    PayerAccount,
    PaymentIntentResult,
    TicketSummary,
)
from src.service.ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.ticketing.domain.domain_error import InvalidAmountError
from src.service.ticketing.domain.entity.buyer_profile_entity import BuyerProfileEntity
from src.service.ticketing.domain.entity.payment_record_entity import PaymentRecordEntity
from src.service.ticketing.domain.enum.payment_type import PaymentType
from src.service.ticketing.domain.value_object.money import to_minor_units


def _failure_label(error: CustomBaseError) -> str:
    return 'gateway_error' if isinstance(error, InternalError) else 'rejected'


class PaymentIntentOrchestrator:
    """
    Turn a purchase request into a gateway transaction.

    Flow:
    1. Validate caller, arguments and amount (no side effect before this)
    2. Primary: read-only availability check / Marketplace: commit a hold
    3. Resolve the buyer's payer account, creating it at the gateway once
    4. Create the gateway transaction with reconciliation metadata
    5. Persist the pending PaymentRecord keyed by the gateway transaction id

    Steps 4 and 5 are not one transaction. A notification that arrives between
    them is refused by the settlement processor until the record exists, so the
    gateway keeps redelivering it.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        payment_gateway: IPaymentGateway,
        inventory_ledger: InventoryLedger,
        reservation_manager: ReservationManager,
        min_amount: int,
        max_amount: int,
        clock: Clock = utc_now,
    ) -> None:
        self.uow_factory = uow_factory
        self.payment_gateway = payment_gateway
        self.inventory_ledger = inventory_ledger
        self.reservation_manager = reservation_manager
        self.min_amount = min_amount
        self.max_amount = max_amount
        self.clock = clock

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: UnitOfWorkFactory = Depends(Provide[Container.uow_factory]),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        settings: Settings = Depends(Provide[Container.config_service]),
        clock: Clock = Depends(Provide[Container.clock]),
        inventory_ledger: InventoryLedger = Depends(InventoryLedger.depends),
        reservation_manager: ReservationManager = Depends(ReservationManager.depends),
    ) -> Self:
        return cls(
            uow_factory=uow_factory,
            payment_gateway=payment_gateway,
            inventory_ledger=inventory_ledger,
            reservation_manager=reservation_manager,
            min_amount=settings.MIN_PAYMENT_AMOUNT,
            max_amount=settings.MAX_PAYMENT_AMOUNT,
            clock=clock,
        )

    def validate_amount(self, amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidAmountError('Amount must be an integer number of minor units')
        if amount < self.min_amount or amount > self.max_amount:
            raise InvalidAmountError(
                f'Amount must be between {self.min_amount} and {self.max_amount} minor units'
            )

    @staticmethod
    def _require_caller(buyer_id: Optional[str]) -> str:
        if not buyer_id:
            raise UnauthenticatedError('User must be authenticated')
        return buyer_id

    @Logger.io
    async def create_primary_intent(
        self,
        *,
        buyer_id: str,
        event_id: str,
        tier_id: Optional[str],
        quantity: int,
        amount: int,
        currency: Optional[str] = None,
        description: Optional[str] = None,
        email: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> PaymentIntentResult:
        buyer_id = self._require_caller(buyer_id)
        if not event_id:
            raise InvalidArgumentError('event_id is required')
        if quantity < 1:
            raise InvalidArgumentError('quantity must be at least 1')
        self.validate_amount(amount)

        try:
            snapshot = await self.inventory_ledger.check_availability_for_primary_purchase(
                event_id=event_id, tier_id=tier_id, quantity=quantity
            )
            # The event's currency is the only one its tickets are priced in
            charge_currency = snapshot.currency.lower()
            if currency and currency.lower() != charge_currency:
                raise InvalidArgumentError(
                    f'currency must be {charge_currency} for event {event_id}, got {currency}'
                )
            payer = await self.ensure_payer_account(
                user_id=buyer_id, email=email, display_name=display_name
            )

            transaction = await self.payment_gateway.create_payment_transaction(
                amount=amount,
                currency=charge_currency,
                payer_reference=payer.payer_reference,
                metadata={
                    'type': PaymentType.PRIMARY.value,
                    'buyer_id': buyer_id,
                    'event_id': event_id,
                    'event_name': snapshot.event_name,
                    'tier_id': snapshot.tier_id or '',
                    'quantity': str(quantity),
                },
                description=description or f'{quantity} ticket(s) for {snapshot.event_name}',
            )
        except CustomBaseError as e:
            metrics.record_payment_intent(
                payment_type=PaymentType.PRIMARY, result=_failure_label(e)
            )
            raise

        record = PaymentRecordEntity.create_primary(
            transaction_id=transaction.transaction_id,
            buyer_id=buyer_id,
            event_id=event_id,
            tier_id=snapshot.tier_id,
            quantity=quantity,
            amount=amount,
            currency=charge_currency,
            now=self.clock(),
        )
        async with self.uow_factory() as uow:
            await uow.payment_record_repo.create(record=record)
            await uow.commit()

        metrics.record_payment_intent(
            payment_type=PaymentType.PRIMARY, result='created', amount=amount
        )
        Logger.base.info(
            f'💳 [INTENT] primary {transaction.transaction_id} event={event_id} '
            f'qty={quantity} amount={amount} {charge_currency}'
        )
        return PaymentIntentResult(
            client_secret=transaction.client_secret,
            transaction_id=transaction.transaction_id,
            payer_reference=payer.payer_reference,
        )

    @Logger.io
    async def create_marketplace_intent(
        self,
        *,
        buyer_id: str,
        ticket_id: str,
        description: Optional[str] = None,
        email: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> PaymentIntentResult:
        """
        The hold is committed before the gateway call. If the gateway then fails
        the hold is left to expire, so the buyer can retry within the TTL.
        """
        buyer_id = self._require_caller(buyer_id)
        if not ticket_id:
            raise InvalidArgumentError('ticket_id is required')

        try:
            reservation = await self.reservation_manager.reserve(
                ticket_id=ticket_id, buyer_id=buyer_id
            )
            amount = to_minor_units(reservation.listing_price)
            try:
                self.validate_amount(amount)
            except InvalidAmountError:
                await self.reservation_manager.release(ticket_id=ticket_id, buyer_id=buyer_id)
                raise

            async with self.uow_factory() as uow:
                event = await uow.event_command_repo.get_by_id(event_id=reservation.event_id)
            event_name = event.name if event else ''

            payer = await self.ensure_payer_account(
                user_id=buyer_id, email=email, display_name=display_name
            )
            charge_currency = reservation.currency.lower()
            transaction = await self.payment_gateway.create_payment_transaction(
                amount=amount,
                currency=charge_currency,
                payer_reference=payer.payer_reference,
                metadata={
                    'type': PaymentType.MARKETPLACE.value,
                    'buyer_id': buyer_id,
                    'seller_id': reservation.seller_id,
                    'ticket_id': ticket_id,
                    'event_id': reservation.event_id,
                    'event_name': event_name,
                },
                description=description or f'Resale ticket for {event_name or reservation.event_id}',
            )
        except CustomBaseError as e:
            metrics.record_payment_intent(
                payment_type=PaymentType.MARKETPLACE, result=_failure_label(e)
            )
            raise

        record = PaymentRecordEntity.create_marketplace(
            transaction_id=transaction.transaction_id,
            buyer_id=buyer_id,
            seller_id=reservation.seller_id,
            event_id=reservation.event_id,
            ticket_id=ticket_id,
            amount=amount,
            currency=charge_currency,
            reserved_until=reservation.reserved_until,
            now=self.clock(),
        )
        async with self.uow_factory() as uow:
            await uow.payment_record_repo.create(record=record)
            await uow.commit()

        metrics.record_payment_intent(
            payment_type=PaymentType.MARKETPLACE, result='created', amount=amount
        )
        Logger.base.info(
            f'💳 [INTENT] marketplace {transaction.transaction_id} ticket={ticket_id} '
            f'seller={reservation.seller_id} buyer={buyer_id} amount={amount}'
        )
        return PaymentIntentResult(
            client_secret=transaction.client_secret,
            transaction_id=transaction.transaction_id,
            payer_reference=payer.payer_reference,
            ticket_summary=TicketSummary(
                ticket_id=ticket_id,
                event_id=reservation.event_id,
                event_name=event_name,
                listing_price=reservation.listing_price,
                currency=reservation.currency,
            ),
        )

    @Logger.io
    async def ensure_payer_account(
        self,
        *,
        user_id: str,
        email: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> PayerAccount:
        """
        Return the buyer's gateway payer reference, creating it on first use.

        A missing buyer profile is backfilled with empty defaults rather than
        failing the purchase.
        """
        user_id = self._require_caller(user_id)

        async with self.uow_factory() as uow:
            profile = await uow.buyer_profile_repo.get_or_create(
                profile=BuyerProfileEntity.create_default(
                    user_id=user_id,
                    email=email or '',
                    display_name=display_name or '',
                    now=self.clock(),
                )
            )
            await uow.commit()

        if profile.payer_reference:
            return PayerAccount(payer_reference=profile.payer_reference, existing=True)

        payer_reference = await self.payment_gateway.create_payer_account(
            user_id=user_id,
            email=email or profile.email,
            display_name=display_name or profile.display_name,
        )
        async with self.uow_factory() as uow:
            await uow.buyer_profile_repo.update(
                profile=profile.with_payer_reference(payer_reference, now=self.clock())
            )
            await uow.commit()

        Logger.base.info(f'👤 [PAYER] created {payer_reference} for user={user_id}')
        return PayerAccount(payer_reference=payer_reference, existing=False)

