"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.ticketing.app.command import (
    inventory_ledger,
    payment_intent_orchestrator,
    reservation_manager,
    settlement_processor,
)
from src.service.ticketing.app.query import list_reconciliation_entries_use_case
from src.service.ticketing.driving_adapter.http_controller import payment_webhook_controller
from src.service.ticketing.driving_adapter.http_controller.auth import current_user


WIRE_MODULES: list[ModuleType] = [
    inventory_ledger,
    reservation_manager,
    payment_intent_orchestrator,
    settlement_processor,
    list_reconciliation_entries_use_case,
    payment_webhook_controller,
    current_user,
]
