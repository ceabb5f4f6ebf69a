from typing import AsyncContextManager, Callable, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import DataUnavailableError
from src.platform.logging.loguru_io import Logger
from src.service.cinema_booking.app.interface.i_showtime_query_repo import IShowtimeQueryRepo
from src.service.cinema_booking.domain.entity.showtime_entity import Showtime
from src.service.cinema_booking.driven_adapter.model.catalog_model import ShowtimeModel


class ShowtimeQueryRepoImpl(IShowtimeQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @staticmethod
    def _to_entity(db_showtime: ShowtimeModel) -> Showtime:
        return Showtime(
            id=db_showtime.id,
            movie_id=db_showtime.movie_id,
            theater_id=db_showtime.theater_id,
            show_date=db_showtime.show_date,
            show_time=db_showtime.show_time,
            price=db_showtime.price,
            movie_title=db_showtime.movie.title if db_showtime.movie else None,
            theater_name=db_showtime.theater.name if db_showtime.theater else None,
            theater_city=db_showtime.theater.city if db_showtime.theater else None,
        )

    @Logger.io
    async def get_by_id(self, *, showtime_id: UUID) -> Optional[Showtime]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(ShowtimeModel).where(ShowtimeModel.id == showtime_id)
                )
                db_showtime = result.unique().scalar_one_or_none()
                return self._to_entity(db_showtime) if db_showtime else None
        except (SQLAlchemyError, OSError) as e:
            raise DataUnavailableError('Showtime could not be loaded') from e
