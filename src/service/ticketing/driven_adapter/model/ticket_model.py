from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class TicketModel(Base):
    __tablename__ = 'ticket'

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    event_id: Mapped[str] = mapped_column(
        String(36), ForeignKey('event.id'), nullable=False, index=True
    )
    owner_id: Mapped[str] = mapped_column(String(255), nullable=False)
    tier_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    purchase_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    state: Mapped[str] = mapped_column(String(20), default='issued', nullable=False)
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    transfer_lock: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Resale
    listing_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    listed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    reserved_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    reserved_until: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    previous_owner_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    transfer_price: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)

    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index('ix_ticket_owner_event', 'owner_id', 'event_id'),)
