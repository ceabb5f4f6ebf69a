from typing import Optional, Self
from uuid import UUID

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
)
from src.platform.logging.loguru_io import Logger
from src.service.cinema_booking.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.cinema_booking.app.interface.i_showtime_lock import IShowtimeLock
from src.service.cinema_booking.domain.entity.booking_entity import Booking


class CancelBookingUseCase:
    """
    Cancel a pending booking and release its seats.

    Runs under the same per-showtime lock as payment finalization so a booking
    cannot be cancelled halfway through being paid.
    """

    def __init__(
        self,
        *,
        booking_command_repo: IBookingCommandRepo,
        showtime_lock: IShowtimeLock,
    ) -> None:
        self.booking_command_repo = booking_command_repo
        self.showtime_lock = showtime_lock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        booking_command_repo: IBookingCommandRepo = Depends(
            Provide[Container.booking_command_repo]
        ),
        showtime_lock: IShowtimeLock = Depends(Provide[Container.showtime_lock]),
    ) -> Self:
        return cls(booking_command_repo=booking_command_repo, showtime_lock=showtime_lock)

    @Logger.io
    async def cancel(self, *, booking_id: UUID, user_id: Optional[str]) -> Booking:
        if not user_id:
            raise UnauthenticatedError()

        with self.tracer.start_as_current_span(
            'use_case.cancel_booking', attributes={'booking.id': str(booking_id)}
        ):
            booking = await self.booking_command_repo.get_by_id(booking_id=booking_id)
            if not booking:
                raise NotFoundError('Booking not found')
            if booking.user_id != user_id:
                raise ForbiddenError('Only the booking owner can cancel it')
            booking.cancel()  # fail fast before taking the lock

            async with self.showtime_lock.hold(showtime_id=booking.showtime_id):
                return await self.cancel_locked(booking_id=booking_id)

    @Logger.io
    async def cancel_locked(self, *, booking_id: UUID) -> Booking:
        """Cancel with the showtime lock already held by the caller."""
        booking = await self.booking_command_repo.get_by_id(booking_id=booking_id)
        if not booking:
            raise NotFoundError('Booking not found')
        cancelled = await self.booking_command_repo.cancel_booking(booking=booking.cancel())
        Logger.base.info(
            f'🗑️ [CANCEL] {booking_id} cancelled, released seats {cancelled.seat_ids}'
        )
        return cancelled
