from enum import StrEnum


class SettlementOutcome(StrEnum):
    APPLIED = 'applied'
    DUPLICATE = 'duplicate'
    IGNORED = 'ignored'
    NEEDS_RECONCILIATION = 'needs_reconciliation'
    ACKNOWLEDGED = 'acknowledged'
