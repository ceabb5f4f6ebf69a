from typing import AsyncContextManager, Callable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import DataUnavailableError
from src.platform.logging.loguru_io import Logger
from src.service.cinema_booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.cinema_booking.domain.entity.booking_entity import Booking, BookingStatus
from src.service.cinema_booking.driven_adapter.model.booking_model import BookingModel
from src.service.cinema_booking.driven_adapter.repo.booking_command_repo_impl import (
    booking_model_to_entity,
)


class BookingQueryRepoImpl(IBookingQueryRepo):
    """Booking reads for display; served by the read replica when one is configured."""

    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @Logger.io
    async def get_by_id(self, *, booking_id: UUID) -> Optional[Booking]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(BookingModel).where(BookingModel.id == booking_id)
                )
                db_booking = result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            raise DataUnavailableError('Booking could not be loaded') from e
        return booking_model_to_entity(db_booking) if db_booking else None

    @Logger.io(truncate_content=True)
    async def list_user_bookings(
        self, *, user_id: str, status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        query = select(BookingModel).where(BookingModel.user_id == user_id)
        if status:
            query = query.where(BookingModel.status == status.value)

        try:
            async with self.session_factory() as session:
                result = await session.execute(query.order_by(BookingModel.created_at.desc()))
                return [booking_model_to_entity(row) for row in result.scalars().all()]
        except (SQLAlchemyError, OSError) as e:
            raise DataUnavailableError('Bookings could not be listed') from e
