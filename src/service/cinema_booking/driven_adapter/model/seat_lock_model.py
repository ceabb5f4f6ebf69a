from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from src.platform.database.orm_db_setting import Base


class SeatLockModel(Base):
    """
    Seat ownership per showtime. The primary key allows one owning booking per
    seat. Rows change only together with a booking status transition.
    """

    __tablename__ = 'seat_lock'

    showtime_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    seat_id: Mapped[str] = mapped_column(String(8), primary_key=True)
    booking_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey('booking.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
