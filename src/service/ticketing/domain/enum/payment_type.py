from enum import StrEnum


class PaymentType(StrEnum):
    PRIMARY = 'primary'
    MARKETPLACE = 'marketplace'
