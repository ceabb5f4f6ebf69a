from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import ARRAY, CheckConstraint, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class BookingModel(Base):
    __tablename__ = 'booking'
    __table_args__ = (
        Index('ix_booking_showtime_status', 'showtime_id', 'status'),
        Index('ix_booking_status_created_at', 'status', 'created_at'),
        CheckConstraint('seat_count = cardinality(seat_ids)', name='ck_booking_seat_count'),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'paid', 'cancelled')", name='ck_booking_status'
        ),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)  # UUID7
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    showtime_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True), ForeignKey('showtime.id'), nullable=False
    )
    seat_ids: Mapped[List[str]] = mapped_column(ARRAY(String(8)), nullable=False)
    seat_count: Mapped[int] = mapped_column(Integer, nullable=False)
    total_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default='pending', nullable=False)
    payment_method: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    transaction_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
