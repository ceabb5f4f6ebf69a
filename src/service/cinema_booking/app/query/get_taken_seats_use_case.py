from typing import List, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.cinema_booking.app.interface.i_seat_ledger_query_repo import (
    ISeatLedgerQueryRepo,
)
from src.service.cinema_booking.app.interface.i_showtime_query_repo import IShowtimeQueryRepo
from src.service.cinema_booking.domain.value_object.seat_map import sort_seat_ids


class GetTakenSeatsUseCase:
    """Seat ledger: seats held by pending, confirmed or paid bookings of a showtime."""

    def __init__(
        self,
        *,
        seat_ledger_query_repo: ISeatLedgerQueryRepo,
        showtime_query_repo: IShowtimeQueryRepo,
    ) -> None:
        self.seat_ledger_query_repo = seat_ledger_query_repo
        self.showtime_query_repo = showtime_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        seat_ledger_query_repo: ISeatLedgerQueryRepo = Depends(
            Provide[Container.seat_ledger_query_repo]
        ),
        showtime_query_repo: IShowtimeQueryRepo = Depends(Provide[Container.showtime_query_repo]),
    ) -> Self:
        return cls(
            seat_ledger_query_repo=seat_ledger_query_repo,
            showtime_query_repo=showtime_query_repo,
        )

    @Logger.io(truncate_content=True)
    async def get_taken_seats(self, *, showtime_id: UUID) -> List[str]:
        """
        Raises:
            NotFoundError: unknown showtime
            DataUnavailableError: ledger could not be read; do not treat as "all free"
        """
        if not await self.showtime_query_repo.get_by_id(showtime_id=showtime_id):
            raise NotFoundError('Showtime not found')
        taken = await self.seat_ledger_query_repo.get_taken_seats(showtime_id=showtime_id)
        return sort_seat_ids(set(taken))
