"""Application layer interfaces (Ports)"""

from src.service.ticketing.app.interface.i_buyer_profile_repo import IBuyerProfileRepo
from src.service.ticketing.app.interface.i_event_command_repo import IEventCommandRepo
from src.service.ticketing.app.interface.i_payment_gateway import (
    GatewayTransaction,
    IPaymentGateway,
)
from src.service.ticketing.app.interface.i_payment_record_repo import IPaymentRecordRepo
from src.service.ticketing.app.interface.i_reconciliation_repo import IReconciliationRepo
from src.service.ticketing.app.interface.i_ticket_command_repo import ITicketCommandRepo
from src.service.ticketing.app.interface.i_transfer_record_repo import ITransferRecordRepo

__all__ = [
    'GatewayTransaction',
    'IBuyerProfileRepo',
    'IEventCommandRepo',
    'IPaymentGateway',
    'IPaymentRecordRepo',
    'IReconciliationRepo',
    'ITicketCommandRepo',
    'ITransferRecordRepo',
]
