from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from src.platform.database.orm_db_setting import Base


class BuyerProfileModel(Base):
    __tablename__ = 'buyer_profile'

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), default='', nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), default='', nullable=False)
    # Gateway customer id
    payer_reference: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f'<BuyerProfileModel(user_id={self.user_id}, payer_reference={self.payer_reference})>'
