"""
Booking Command Repository (primary database)

Seat ownership lives in `seat_lock`, whose (showtime_id, seat_id) primary key
is the storage-level guarantee that a seat has a single owner. Claims are
`INSERT ... ON CONFLICT DO NOTHING`, so concurrent claimers serialize on the
unique index and the loser sees the winner's row once it commits.
"""

from datetime import datetime, timezone
from typing import AsyncContextManager, Callable, Dict, List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import (
    AlreadyFinalizedError,
    DataUnavailableError,
    NotFoundError,
    PersistenceError,
    SeatConflictError,
)
from src.platform.logging.loguru_io import Logger
from src.service.cinema_booking.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.cinema_booking.domain.entity.booking_entity import (
    Booking,
    BookingStatus,
    PaymentMethod,
)
from src.service.cinema_booking.domain.value_object.seat_map import sort_seat_ids
from src.service.cinema_booking.driven_adapter.model.booking_model import BookingModel
from src.service.cinema_booking.driven_adapter.model.seat_lock_model import SeatLockModel


def booking_model_to_entity(db_booking: BookingModel) -> Booking:
    return Booking(
        id=db_booking.id,
        user_id=db_booking.user_id,
        showtime_id=db_booking.showtime_id,
        seat_ids=list(db_booking.seat_ids or []),
        seat_count=db_booking.seat_count,
        total_amount=db_booking.total_amount,
        status=BookingStatus(db_booking.status),
        payment_method=PaymentMethod(db_booking.payment_method)
        if db_booking.payment_method
        else None,
        transaction_id=db_booking.transaction_id,
        created_at=db_booking.created_at,
        updated_at=db_booking.updated_at,
        paid_at=db_booking.paid_at,
    )


class BookingCommandRepoImpl(IBookingCommandRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @staticmethod
    def _claim_seats_stmt(*, booking: Booking):
        return (
            pg_insert(SeatLockModel)
            .values(
                [
                    {
                        'showtime_id': booking.showtime_id,
                        'seat_id': seat_id,
                        'booking_id': booking.id,
                    }
                    for seat_id in booking.seat_ids
                ]
            )
            .on_conflict_do_nothing(index_elements=['showtime_id', 'seat_id'])
            .returning(SeatLockModel.seat_id)
        )

    @staticmethod
    async def _lock_pending_row(session: AsyncSession, *, booking_id: UUID) -> BookingModel:
        result = await session.execute(
            select(BookingModel).where(BookingModel.id == booking_id).with_for_update()
        )
        db_booking = result.scalar_one_or_none()
        if not db_booking:
            raise NotFoundError('Booking not found')
        if db_booking.status != BookingStatus.PENDING:
            raise AlreadyFinalizedError(f'Booking is already {db_booking.status}')
        return db_booking

    @Logger.io
    async def create_booking(self, *, booking: Booking) -> List[str]:
        try:
            async with self.session_factory() as session, session.begin():
                session.add(
                    BookingModel(
                        id=booking.id,
                        user_id=booking.user_id,
                        showtime_id=booking.showtime_id,
                        seat_ids=booking.seat_ids,
                        seat_count=booking.seat_count,
                        total_amount=booking.total_amount,
                        status=booking.status.value,
                        created_at=booking.created_at,
                        updated_at=booking.updated_at,
                    )
                )
                await session.flush()
                result = await session.execute(self._claim_seats_stmt(booking=booking))
                claimed = set(result.scalars().all())
        except (SQLAlchemyError, OSError) as e:
            raise PersistenceError('Failed to create booking') from e

        return sort_seat_ids(set(booking.seat_ids) - claimed)

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

    @Logger.io
    async def get_seat_owners(self, *, showtime_id: UUID, seat_ids: List[str]) -> Dict[str, UUID]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(SeatLockModel.seat_id, SeatLockModel.booking_id).where(
                        SeatLockModel.showtime_id == showtime_id,
                        SeatLockModel.seat_id.in_(seat_ids),
                    )
                )
                return {row.seat_id: row.booking_id for row in result}
        except (SQLAlchemyError, OSError) as e:
            raise DataUnavailableError('Seat ownership could not be read') from e

    @Logger.io
    async def finalize_paid(self, *, booking: Booking) -> Booking:
        try:
            async with self.session_factory() as session, session.begin():
                db_booking = await self._lock_pending_row(session, booking_id=booking.id)

                # Claim whatever is still free, then every seat must be ours
                await session.execute(self._claim_seats_stmt(booking=booking))
                result = await session.execute(
                    select(SeatLockModel.seat_id, SeatLockModel.booking_id).where(
                        SeatLockModel.showtime_id == booking.showtime_id,
                        SeatLockModel.seat_id.in_(booking.seat_ids),
                    )
                )
                conflicts = [row.seat_id for row in result if row.booking_id != booking.id]
                if conflicts:
                    raise SeatConflictError(sort_seat_ids(conflicts))

                db_booking.status = BookingStatus.PAID.value
                db_booking.transaction_id = booking.transaction_id
                db_booking.payment_method = (
                    booking.payment_method.value if booking.payment_method else None
                )
                db_booking.paid_at = booking.paid_at or datetime.now(timezone.utc)
                db_booking.updated_at = booking.updated_at or datetime.now(timezone.utc)
        except (SQLAlchemyError, OSError) as e:
            raise PersistenceError('Failed to record payment') from e

        return booking

    @Logger.io
    async def cancel_booking(self, *, booking: Booking) -> Booking:
        try:
            async with self.session_factory() as session, session.begin():
                db_booking = await self._lock_pending_row(session, booking_id=booking.id)
                db_booking.status = BookingStatus.CANCELLED.value
                db_booking.updated_at = booking.updated_at or datetime.now(timezone.utc)
                await session.execute(
                    delete(SeatLockModel).where(SeatLockModel.booking_id == booking.id)
                )
        except (SQLAlchemyError, OSError) as e:
            raise PersistenceError('Failed to cancel booking') from e

        return booking

    @Logger.io(truncate_content=True)
    async def list_stale_pending(self, *, created_before: datetime, limit: int) -> List[Booking]:
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(BookingModel)
                    .where(
                        BookingModel.status == BookingStatus.PENDING.value,
                        BookingModel.created_at < created_before,
                    )
                    .order_by(BookingModel.created_at)
                    .limit(limit)
                )
                return [booking_model_to_entity(row) for row in result.scalars().all()]
        except (SQLAlchemyError, OSError) as e:
            raise DataUnavailableError('Pending bookings could not be listed') from e
