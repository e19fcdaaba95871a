"""Ticketing Domain Enums"""

from src.service.ticketing.domain.enum.payment_status import PaymentStatus
from src.service.ticketing.domain.enum.payment_type import PaymentType
from src.service.ticketing.domain.enum.ticket_state import TicketState

__all__ = ['PaymentStatus', 'PaymentType', 'TicketState']
