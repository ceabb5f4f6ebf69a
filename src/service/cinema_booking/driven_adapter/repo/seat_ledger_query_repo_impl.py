from typing import AsyncContextManager, Callable, List
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import DataUnavailableError
from src.platform.logging.loguru_io import Logger
from src.service.cinema_booking.app.interface.i_seat_ledger_query_repo import (
    ISeatLedgerQueryRepo,
)
from src.service.cinema_booking.domain.entity.booking_entity import TAKEN_STATUSES
from src.service.cinema_booking.driven_adapter.model.booking_model import BookingModel


class SeatLedgerQueryRepoImpl(ISeatLedgerQueryRepo):
    """
    Taken seats derived from bookings, not from `seat_lock`.

    Overlapping pending bookings all show their seats as taken here, which is
    what the selector should avoid even before ownership is settled.
    """

    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io(truncate_content=True)
    async def get_taken_seats(self, *, showtime_id: UUID) -> List[str]:
        seat_id = func.unnest(BookingModel.seat_ids).label('seat_id')
        query = (
            select(seat_id)
            .where(
                BookingModel.showtime_id == showtime_id,
                BookingModel.status.in_([status.value for status in TAKEN_STATUSES]),
            )
            .distinct()
        )
        try:
            async with self.session_factory() as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except (SQLAlchemyError, OSError) as e:
            raise DataUnavailableError('Seat availability could not be loaded') from e
