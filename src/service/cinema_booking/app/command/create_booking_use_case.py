from typing import List, Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils.compat import uuid7

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import DomainError, NotFoundError, UnauthenticatedError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.cinema_booking.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.cinema_booking.app.interface.i_showtime_query_repo import IShowtimeQueryRepo
from src.service.cinema_booking.domain.entity.booking_entity import Booking
from src.service.cinema_booking.domain.value_object.seat_map import SeatMap


class CreateBookingUseCase:
    """
    Create a pending booking for a set of seats.

    Availability is not enforced here: two pending bookings may list the same
    seat. The first one to be stored claims it, and payment finalization
    rejects any booking that does not own all of its seats.
    """

    def __init__(
        self,
        *,
        booking_command_repo: IBookingCommandRepo,
        showtime_query_repo: IShowtimeQueryRepo,
        seat_map: Optional[SeatMap] = None,
        max_seats: Optional[int] = None,
    ) -> None:
        self.booking_command_repo = booking_command_repo
        self.showtime_query_repo = showtime_query_repo
        self.seat_map = seat_map or SeatMap.default()
        self.max_seats = max_seats or settings.MAX_SEATS_PER_BOOKING
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        booking_command_repo: IBookingCommandRepo = Depends(
            Provide[Container.booking_command_repo]
        ),
        showtime_query_repo: IShowtimeQueryRepo = Depends(Provide[Container.showtime_query_repo]),
    ) -> Self:
        return cls(
            booking_command_repo=booking_command_repo,
            showtime_query_repo=showtime_query_repo,
        )

    @Logger.io
    async def create_booking(
        self,
        *,
        user_id: Optional[str],
        showtime_id: UUID,
        seat_ids: List[str],
        seat_count: int,
        total_amount: int,
    ) -> Booking:
        """
        Raises:
            UnauthenticatedError: no user context
            NotFoundError: showtime is not in the catalog
            DomainError: seat list, seat count or amount invalid
            PersistenceError: storage failure
        """
        if not user_id:
            raise UnauthenticatedError()

        booking_id = uuid7()
        with self.tracer.start_as_current_span(
            'use_case.create_booking',
            attributes={'booking.id': str(booking_id), 'showtime.id': str(showtime_id)},
        ):
            showtime = await self.showtime_query_repo.get_by_id(showtime_id=showtime_id)
            if not showtime:
                raise NotFoundError('Showtime not found')

            booking = Booking.create(
                id=booking_id,
                user_id=user_id,
                showtime_id=showtime_id,
                seat_ids=seat_ids,
                seat_count=seat_count,
                total_amount=total_amount,
                seat_map=self.seat_map,
                max_seats=self.max_seats,
            )
            expected_total = showtime.price * booking.seat_count
            if booking.total_amount != expected_total:
                raise DomainError(
                    f'Total amount mismatch: expected {expected_total} for '
                    f'{booking.seat_count} seat(s), got {booking.total_amount}'
                )

            already_owned = await self.booking_command_repo.create_booking(booking=booking)
            metrics.bookings_created.inc()
            if already_owned:
                metrics.seat_claim_overlaps.inc(len(already_owned))
                Logger.base.warning(
                    f'🪑 [CREATE-BOOKING] {booking_id} overlaps seats held by other bookings: '
                    f'{", ".join(already_owned)}'
                )

            Logger.base.info(
                f'📝 [CREATE-BOOKING] {booking_id} pending for user {user_id}, '
                f'showtime {showtime_id}, seats {booking.seat_ids}'
            )
            return booking
