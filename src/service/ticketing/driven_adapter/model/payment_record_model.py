from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class PaymentRecordModel(Base):
    __tablename__ = 'payment_record'

    # Gateway transaction id
    id: Mapped[str] = mapped_column(String(255), primary_key=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    buyer_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    event_id: Mapped[str] = mapped_column(String(36), nullable=False)
    ticket_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    seller_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    tier_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default='pending', nullable=False)
    failure_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    needs_reconciliation: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    reconciliation_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reserved_until: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    def __repr__(self):
        return f'<PaymentRecordModel(id={self.id}, type={self.type}, status={self.status})>'
