"""
Unit test configuration for the cinema booking service.

In-memory stand-ins for PostgreSQL, Kvrocks, the payment gateway and the
notification sender. The booking store mirrors the seat_lock semantics of the
real repository: the first booking to claim a seat owns it.
"""

from collections import defaultdict
from contextlib import asynccontextmanager
from datetime import date, datetime, time
from typing import AsyncIterator, Dict, List, Optional, Tuple
from uuid import UUID

import anyio
import attrs
import pytest

from src.platform.exception.exceptions import (
    AlreadyFinalizedError,
    CustomBaseError,
    NotFoundError,
    SeatConflictError,
)
from src.service.cinema_booking.app.dto import GatewayResult
from src.service.cinema_booking.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.cinema_booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.cinema_booking.app.interface.i_notification_sender import INotificationSender
from src.service.cinema_booking.app.interface.i_payment_gateway import IPaymentGateway
from src.service.cinema_booking.app.interface.i_seat_ledger_query_repo import (
    ISeatLedgerQueryRepo,
)
from src.service.cinema_booking.app.interface.i_showtime_lock import IShowtimeLock
from src.service.cinema_booking.app.interface.i_showtime_query_repo import IShowtimeQueryRepo
from src.service.cinema_booking.domain.entity.booking_entity import (
    TAKEN_STATUSES,
    Booking,
    BookingStatus,
    PaymentMethod,
)
from src.service.cinema_booking.domain.entity.showtime_entity import Showtime
from src.service.cinema_booking.domain.value_object.seat_map import sort_seat_ids


SHOWTIME_ID = UUID('01936d8f-5e73-7c4e-a9c5-000000000001')
OTHER_SHOWTIME_ID = UUID('01936d8f-5e73-7c4e-a9c5-000000000002')


def _copy(booking: Booking) -> Booking:
    return attrs.evolve(booking, seat_ids=list(booking.seat_ids))


class InMemoryBookingStore(
    IBookingCommandRepo, IBookingQueryRepo, ISeatLedgerQueryRepo
):
    def __init__(self) -> None:
        self.bookings: Dict[UUID, Booking] = {}
        self.seat_locks: Dict[Tuple[UUID, str], UUID] = {}
        self.finalize_error: Optional[CustomBaseError] = None
        self.ledger_error: Optional[CustomBaseError] = None

    def _claim(self, booking: Booking) -> List[str]:
        already_owned = []
        for seat_id in booking.seat_ids:
            owner = self.seat_locks.setdefault((booking.showtime_id, seat_id), booking.id)
            if owner != booking.id:
                already_owned.append(seat_id)
        return sort_seat_ids(already_owned)

    def _stored_pending(self, booking_id: UUID) -> Booking:
        stored = self.bookings.get(booking_id)
        if not stored:
            raise NotFoundError('Booking not found')
        if stored.status != BookingStatus.PENDING:
            raise AlreadyFinalizedError(f'Booking is already {stored.status}')
        return stored

    def add(self, booking: Booking) -> Booking:
        """Store a booking as-is, without claiming seats."""
        self.bookings[booking.id] = _copy(booking)
        return booking

    async def create_booking(self, *, booking: Booking) -> List[str]:
        self.bookings[booking.id] = _copy(booking)
        return self._claim(booking)

    async def get_by_id(self, *, booking_id: UUID) -> Optional[Booking]:
        stored = self.bookings.get(booking_id)
        return _copy(stored) if stored else None

    async def get_seat_owners(self, *, showtime_id: UUID, seat_ids: List[str]) -> Dict[str, UUID]:
        return {
            seat_id: self.seat_locks[(showtime_id, seat_id)]
            for seat_id in seat_ids
            if (showtime_id, seat_id) in self.seat_locks
        }

    async def finalize_paid(self, *, booking: Booking) -> Booking:
        if self.finalize_error:
            raise self.finalize_error
        self._stored_pending(booking.id)
        if conflicts := self._claim(booking):
            raise SeatConflictError(conflicts)
        self.bookings[booking.id] = _copy(booking)
        return booking

    async def cancel_booking(self, *, booking: Booking) -> Booking:
        self._stored_pending(booking.id)
        self.bookings[booking.id] = _copy(booking)
        for key in [key for key, owner in self.seat_locks.items() if owner == booking.id]:
            del self.seat_locks[key]
        return booking

    async def list_stale_pending(self, *, created_before: datetime, limit: int) -> List[Booking]:
        stale = sorted(
            (
                b
                for b in self.bookings.values()
                if b.status == BookingStatus.PENDING
                and b.created_at is not None
                and b.created_at < created_before
            ),
            key=lambda b: b.created_at or created_before,
        )
        return [_copy(b) for b in stale[:limit]]

    async def list_user_bookings(
        self, *, user_id: str, status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        mine = [
            _copy(b)
            for b in self.bookings.values()
            if b.user_id == user_id and (status is None or b.status == status)
        ]
        return sorted(mine, key=lambda b: b.created_at or datetime.min, reverse=True)

    async def get_taken_seats(self, *, showtime_id: UUID) -> List[str]:
        if self.ledger_error:
            raise self.ledger_error
        return [
            seat_id
            for b in self.bookings.values()
            if b.showtime_id == showtime_id and b.status in TAKEN_STATUSES
            for seat_id in b.seat_ids
        ]


class InMemoryShowtimeRepo(IShowtimeQueryRepo):
    def __init__(self, showtimes: List[Showtime]) -> None:
        self.showtimes = {showtime.id: showtime for showtime in showtimes}

    async def get_by_id(self, *, showtime_id: UUID) -> Optional[Showtime]:
        return self.showtimes.get(showtime_id)


class InProcessShowtimeLock(IShowtimeLock):
    def __init__(self) -> None:
        self._locks: Dict[UUID, anyio.Lock] = defaultdict(anyio.Lock)
        self.acquisitions = 0

    @asynccontextmanager
    async def hold(self, *, showtime_id: UUID) -> AsyncIterator[None]:
        async with self._locks[showtime_id]:
            self.acquisitions += 1
            yield


class FakePaymentGateway(IPaymentGateway):
    def __init__(self) -> None:
        self.charges: List[Tuple[int, PaymentMethod]] = []
        self.refunds: List[Tuple[str, int]] = []
        self.declines_left = 0
        self.delay = 0.0
        self.error: Optional[Exception] = None
        self.refund_error: Optional[Exception] = None

    async def charge(self, *, amount: int, payment_method: PaymentMethod) -> GatewayResult:
        self.charges.append((amount, payment_method))
        if self.delay:
            await anyio.sleep(self.delay)
        if self.error:
            raise self.error
        if self.declines_left:
            self.declines_left -= 1
            return GatewayResult(success=False, message='Card declined')
        return GatewayResult(success=True, transaction_id=f'TXN_TEST_{len(self.charges)}')

    async def refund(self, *, transaction_id: str, amount: int) -> bool:
        self.refunds.append((transaction_id, amount))
        if self.refund_error:
            raise self.refund_error
        return True


class FakeNotificationSender(INotificationSender):
    def __init__(self) -> None:
        self.sent: List[Booking] = []
        self.fail = False

    async def send_payment_confirmation(
        self, *, booking: Booking, movie_title: str, show_date: str
    ) -> None:
        if self.fail:
            raise RuntimeError('smtp down')
        self.sent.append(booking)


@pytest.fixture
def showtime() -> Showtime:
    return Showtime(
        id=SHOWTIME_ID,
        movie_id=UUID('01936d8f-5e73-7c4e-a9c5-0000000000a1'),
        theater_id=UUID('01936d8f-5e73-7c4e-a9c5-0000000000b1'),
        show_date=date(2025, 1, 12),
        show_time=time(19, 30),
        price=250,
        movie_title='Inception',
        theater_name='PVR Phoenix',
        theater_city='Mumbai',
    )


@pytest.fixture
def booking_store() -> InMemoryBookingStore:
    return InMemoryBookingStore()


@pytest.fixture
def showtime_repo(showtime: Showtime) -> InMemoryShowtimeRepo:
    return InMemoryShowtimeRepo([showtime])


@pytest.fixture
def showtime_lock() -> InProcessShowtimeLock:
    return InProcessShowtimeLock()


@pytest.fixture
def payment_gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def notification_sender() -> FakeNotificationSender:
    return FakeNotificationSender()
