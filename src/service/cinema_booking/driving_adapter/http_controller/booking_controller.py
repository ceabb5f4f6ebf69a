from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.cinema_booking.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.cinema_booking.app.command.create_booking_use_case import CreateBookingUseCase
from src.service.cinema_booking.app.query.get_booking_use_case import GetBookingUseCase
from src.service.cinema_booking.app.query.list_bookings_use_case import ListBookingsUseCase
from src.service.cinema_booking.domain.entity.booking_entity import BookingStatus
from src.service.cinema_booking.driving_adapter.http_controller.auth.current_user import (
    get_current_user_id,
)
from src.service.cinema_booking.driving_adapter.http_controller.schema.booking_schema import (
    BookingCreateRequest,
    BookingResponse,
    CancelBookingResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_booking(
    request: BookingCreateRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: CreateBookingUseCase = Depends(CreateBookingUseCase.depends),
) -> BookingResponse:
    with tracer.start_as_current_span('controller.create_booking') as span:
        span.set_attribute('showtime.id', str(request.showtime_id))
        span.set_attribute('seat_count', request.seat_count)

        booking = await use_case.create_booking(
            user_id=user_id,
            showtime_id=request.showtime_id,
            seat_ids=request.seat_ids,
            seat_count=request.seat_count,
            total_amount=request.total_amount,
        )
        span.set_attribute('booking.id', str(booking.id))
        return BookingResponse.from_entity(booking)


@router.get('/my_booking', response_model=List[BookingResponse])
@Logger.io
async def list_my_bookings(
    booking_status: Optional[BookingStatus] = None,
    user_id: str = Depends(get_current_user_id),
    use_case: ListBookingsUseCase = Depends(ListBookingsUseCase.depends),
) -> List[BookingResponse]:
    bookings = await use_case.list_user_bookings(user_id=user_id, status=booking_status)
    return [BookingResponse.from_entity(booking) for booking in bookings]


@router.get('/{booking_id}')
@Logger.io
async def get_booking(
    booking_id: UUID,
    user_id: str = Depends(get_current_user_id),
    use_case: GetBookingUseCase = Depends(GetBookingUseCase.depends),
) -> BookingResponse:
    booking = await use_case.get_booking(booking_id=booking_id, user_id=user_id)
    return BookingResponse.from_entity(booking)


@router.patch('/{booking_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def cancel_booking(
    booking_id: UUID,
    user_id: str = Depends(get_current_user_id),
    use_case: CancelBookingUseCase = Depends(CancelBookingUseCase.depends),
) -> CancelBookingResponse:
    booking = await use_case.cancel(booking_id=booking_id, user_id=user_id)
    return CancelBookingResponse(status=booking.status.value, released_seats=booking.seat_ids)
