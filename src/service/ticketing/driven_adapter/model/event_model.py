from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class EventModel(Base):
    __tablename__ = 'event'

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    tickets_issued: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    tickets_remaining: Mapped[int] = mapped_column(Integer, nullable=False)
    # [{"name", "price", "quantity", "remaining"}], price as a decimal string
    pricing_tiers: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default='CHF', nullable=False)
    end_time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint('tickets_remaining >= 0', name='ck_event_remaining_non_negative'),
        CheckConstraint(
            'tickets_remaining = capacity - tickets_issued', name='ck_event_counters_consistent'
        ),
    )
