"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from src.service.ticketing.driven_adapter.model.buyer_profile_model import BuyerProfileModel
from src.service.ticketing.driven_adapter.model.event_model import EventModel
from src.service.ticketing.driven_adapter.model.payment_record_model import PaymentRecordModel
from src.service.ticketing.driven_adapter.model.reconciliation_entry_model import (
    ReconciliationEntryModel,
)
from src.service.ticketing.driven_adapter.model.ticket_model import TicketModel
from src.service.ticketing.driven_adapter.model.transfer_record_model import TransferRecordModel

__all__ = [
    'BuyerProfileModel',
    'EventModel',
    'PaymentRecordModel',
    'ReconciliationEntryModel',
    'TicketModel',
    'TransferRecordModel',
]
