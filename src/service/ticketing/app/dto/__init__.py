"""Application layer DTOs"""

from src.service.ticketing.app.dto.ledger_snapshot import LedgerSnapshot
from src.service.ticketing.app.dto.payment_intent_result import (
    PayerAccount,
    PaymentIntentResult,
    TicketSummary,
)
from src.service.ticketing.app.dto.reservation_result import ReservationResult
from src.service.ticketing.app.dto.settlement_outcome import SettlementOutcome

__all__ = [
    'LedgerSnapshot',
    'PayerAccount',
    'PaymentIntentResult',
    'ReservationResult',
    'SettlementOutcome',
    'TicketSummary',
]
