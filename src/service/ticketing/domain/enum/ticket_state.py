from enum import StrEnum


class TicketState(StrEnum):
    ISSUED = 'issued'
    LISTED = 'listed'
    TRANSFERRED = 'transferred'
    REVOKED = 'revoked'

    @classmethod
    def held_by_owner(cls) -> tuple['TicketState', ...]:
        """States in which the ticket still admits its owner (revoked on refund)"""
        return (cls.ISSUED, cls.LISTED, cls.TRANSFERRED)
