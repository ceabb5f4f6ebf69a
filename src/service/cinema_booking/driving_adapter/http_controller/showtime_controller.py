from uuid import UUID

from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.service.cinema_booking.app.query.get_showtime_use_case import GetShowtimeUseCase
from src.service.cinema_booking.app.query.get_taken_seats_use_case import GetTakenSeatsUseCase
from src.service.cinema_booking.domain.value_object.seat_map import SeatMap
from src.service.cinema_booking.driving_adapter.http_controller.schema.showtime_schema import (
    ShowtimeResponse,
    TakenSeatsResponse,
)


router = APIRouter()


@router.get('/{showtime_id}')
@Logger.io
async def get_showtime(
    showtime_id: UUID,
    use_case: GetShowtimeUseCase = Depends(GetShowtimeUseCase.depends),
) -> ShowtimeResponse:
    showtime = await use_case.get_showtime(showtime_id=showtime_id)
    return ShowtimeResponse(
        id=showtime.id,
        movie_id=showtime.movie_id,
        theater_id=showtime.theater_id,
        show_date=showtime.show_date,
        show_time=showtime.show_time,
        price=showtime.price,
        movie_title=showtime.movie_title,
        theater_name=showtime.theater_name,
        theater_city=showtime.theater_city,
    )


@router.get('/{showtime_id}/seats')
@Logger.io(truncate_content=True)
async def get_taken_seats(
    showtime_id: UUID,
    use_case: GetTakenSeatsUseCase = Depends(GetTakenSeatsUseCase.depends),
) -> TakenSeatsResponse:
    """Polled by seat selection clients; safe to call repeatedly."""
    taken_seats = await use_case.get_taken_seats(showtime_id=showtime_id)
    seat_map = SeatMap.default()
    return TakenSeatsResponse(
        showtime_id=showtime_id,
        rows=list(seat_map.rows),
        seats_per_row=seat_map.seats_per_row,
        taken_seats=taken_seats,
    )
