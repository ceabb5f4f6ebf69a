"""
Unit tests for ExpirePendingBookingsUseCase (pending booking reaper)
"""

from datetime import datetime, timedelta, timezone
from functools import partial
from uuid import UUID

import anyio
import attrs
import pytest

from src.service.cinema_booking.app.command.expire_pending_bookings_use_case import (
    ExpirePendingBookingsUseCase,
)
from src.service.cinema_booking.domain.entity.booking_entity import (
    Booking,
    BookingStatus,
    PaymentMethod,
)


SHOWTIME_ID = UUID('01936d8f-5e73-7c4e-a9c5-000000000001')
NOW = datetime(2025, 1, 12, 12, 0, tzinfo=timezone.utc)


def _booking(n: int, *, age: timedelta, status: BookingStatus = BookingStatus.PENDING) -> Booking:
    return Booking(
        id=UUID(f'01936d8f-6a10-7b2e-8c4d-{n:012d}'),
        user_id='user-a',
        showtime_id=SHOWTIME_ID,
        seat_ids=[f'A{n}'],
        seat_count=1,
        total_amount=250,
        status=status,
        created_at=NOW - age,
        updated_at=NOW - age,
    )


@pytest.mark.unit
class TestExpirePendingBookings:
    @pytest.fixture
    def reaper(self, booking_store, showtime_lock) -> ExpirePendingBookingsUseCase:
        return ExpirePendingBookingsUseCase(
            booking_command_repo=booking_store, showtime_lock=showtime_lock, ttl_seconds=600
        )

    @pytest.mark.asyncio
    async def test_only_stale_pending_bookings_expire(self, reaper, booking_store) -> None:
        # Arrange
        stale = _booking(1, age=timedelta(minutes=30))
        fresh = _booking(2, age=timedelta(minutes=5))
        paid = attrs.evolve(
            _booking(3, age=timedelta(hours=2)),
            status=BookingStatus.PAID,
            payment_method=PaymentMethod.CREDIT,
            transaction_id='TXN_3',
        )
        for booking in (stale, fresh, paid):
            await booking_store.create_booking(booking=booking)

        # Act
        expired = await reaper.expire_once(now=NOW)

        # Assert
        assert expired == [stale.id]
        assert booking_store.bookings[stale.id].status == BookingStatus.CANCELLED
        assert booking_store.bookings[fresh.id].status == BookingStatus.PENDING
        assert booking_store.bookings[paid.id].status == BookingStatus.PAID
        assert (SHOWTIME_ID, 'A1') not in booking_store.seat_locks
        assert (SHOWTIME_ID, 'A2') in booking_store.seat_locks

    @pytest.mark.asyncio
    async def test_booking_finalized_since_scan_is_skipped(
        self, reaper, booking_store, monkeypatch
    ) -> None:
        # Arrange
        stale = _booking(1, age=timedelta(minutes=30))
        await booking_store.create_booking(booking=stale)
        list_stale = booking_store.list_stale_pending

        async def list_then_pay(**kwargs):
            found = await list_stale(**kwargs)
            booking_store.add(
                stale.mark_as_paid(transaction_id='TXN_1', payment_method=PaymentMethod.UPI)
            )
            return found

        monkeypatch.setattr(booking_store, 'list_stale_pending', list_then_pay)

        # Act
        expired = await reaper.expire_once(now=NOW)

        # Assert
        assert expired == []
        assert booking_store.bookings[stale.id].status == BookingStatus.PAID

    @pytest.mark.asyncio
    async def test_run_forever_survives_unexpected_sweep_errors(
        self, reaper, booking_store, monkeypatch
    ) -> None:
        # Arrange
        stale = _booking(1, age=timedelta(days=1))
        await booking_store.create_booking(booking=stale)
        expire_once = reaper.expire_once
        calls = 0
        second_sweep_done = anyio.Event()

        async def fail_first_sweep(**kwargs):
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError('lock client bug')
            expired = await expire_once(**kwargs)
            second_sweep_done.set()
            return expired

        monkeypatch.setattr(reaper, 'expire_once', fail_first_sweep)

        # Act
        with anyio.fail_after(2):
            async with anyio.create_task_group() as tg:
                tg.start_soon(partial(reaper.run_forever, interval=0))
                await second_sweep_done.wait()
                tg.cancel_scope.cancel()

        # Assert
        assert calls >= 2
        assert booking_store.bookings[stale.id].status == BookingStatus.CANCELLED
