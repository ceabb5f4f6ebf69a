"""
Integration tests for BookingCommandRepoImpl and SeatLedgerQueryRepoImpl

Runs the seat ownership SQL against PostgreSQL:
1. INSERT ... ON CONFLICT DO NOTHING claims at creation (first claimant owns)
2. finalize_paid: row lock, claim, owner re-check, status update in one transaction
3. Concurrent finalize_paid on a freed seat: exactly one booking reaches paid
4. Cancel deletes seat_lock rows so another booking can claim them
5. unnest(seat_ids) ledger read
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

import anyio
import attrs
import pytest
from uuid_utils.compat import uuid7

from src.platform.exception.exceptions import (
    AlreadyFinalizedError,
    CustomBaseError,
    SeatConflictError,
)
from src.service.cinema_booking.domain.entity.booking_entity import (
    Booking,
    BookingStatus,
    PaymentMethod,
)
from src.service.cinema_booking.domain.value_object.seat_map import SeatMap
from src.service.cinema_booking.driven_adapter.repo.booking_command_repo_impl import (
    BookingCommandRepoImpl,
)
from src.service.cinema_booking.driven_adapter.repo.seat_ledger_query_repo_impl import (
    SeatLedgerQueryRepoImpl,
)


SHOWTIME_ID = UUID('01936d8f-5e73-7c4e-a9c5-000000000001')
OTHER_SHOWTIME_ID = UUID('01936d8f-5e73-7c4e-a9c5-000000000002')


def _new_booking(
    user_id: str, seat_ids: List[str], *, showtime_id: UUID = SHOWTIME_ID
) -> Booking:
    return Booking.create(
        id=uuid7(),
        user_id=user_id,
        showtime_id=showtime_id,
        seat_ids=seat_ids,
        seat_count=len(seat_ids),
        total_amount=250 * len(seat_ids),
        seat_map=SeatMap.default(),
        max_seats=10,
    )


def _paid(booking: Booking, transaction_id: str) -> Booking:
    return booking.mark_as_paid(transaction_id=transaction_id, payment_method=PaymentMethod.UPI)


@pytest.mark.integration
class TestCreateBookingClaims:
    @pytest.mark.asyncio
    async def test_overlapping_creates_keep_the_first_claimant(
        self, command_repo: BookingCommandRepoImpl
    ) -> None:
        # Arrange
        booking_a = _new_booking('user-a', ['C7', 'C8'])
        booking_b = _new_booking('user-b', ['C8', 'C9'])

        # Act
        overlap_a = await command_repo.create_booking(booking=booking_a)
        overlap_b = await command_repo.create_booking(booking=booking_b)

        # Assert
        assert overlap_a == []
        assert overlap_b == ['C8']
        owners = await command_repo.get_seat_owners(
            showtime_id=SHOWTIME_ID, seat_ids=['C7', 'C8', 'C9']
        )
        assert owners == {'C7': booking_a.id, 'C8': booking_a.id, 'C9': booking_b.id}
        stored_b = await command_repo.get_by_id(booking_id=booking_b.id)
        assert stored_b is not None
        assert stored_b.status == BookingStatus.PENDING

    @pytest.mark.asyncio
    async def test_same_seat_in_another_showtime_is_independent(
        self, command_repo: BookingCommandRepoImpl
    ) -> None:
        await command_repo.create_booking(booking=_new_booking('user-a', ['C8']))

        overlap = await command_repo.create_booking(
            booking=_new_booking('user-b', ['C8'], showtime_id=OTHER_SHOWTIME_ID)
        )

        assert overlap == []


@pytest.mark.integration
class TestFinalizePaid:
    @pytest.mark.asyncio
    async def test_owner_is_marked_paid(self, command_repo: BookingCommandRepoImpl) -> None:
        # Arrange
        booking = _new_booking('user-a', ['C7', 'C8'])
        await command_repo.create_booking(booking=booking)

        # Act
        await command_repo.finalize_paid(booking=_paid(booking, 'TXN_A'))

        # Assert
        stored = await command_repo.get_by_id(booking_id=booking.id)
        assert stored is not None
        assert stored.status == BookingStatus.PAID
        assert stored.transaction_id == 'TXN_A'
        assert stored.payment_method == PaymentMethod.UPI
        assert stored.paid_at is not None

    @pytest.mark.asyncio
    async def test_non_owner_conflicts_and_stays_pending(
        self, command_repo: BookingCommandRepoImpl
    ) -> None:
        # Arrange
        booking_a = _new_booking('user-a', ['C7', 'C8'])
        booking_b = _new_booking('user-b', ['C8', 'C9'])
        await command_repo.create_booking(booking=booking_a)
        await command_repo.create_booking(booking=booking_b)

        # Act
        with pytest.raises(SeatConflictError) as exc_info:
            await command_repo.finalize_paid(booking=_paid(booking_b, 'TXN_B'))

        # Assert
        assert exc_info.value.seat_ids == ['C8']
        stored_b = await command_repo.get_by_id(booking_id=booking_b.id)
        assert stored_b is not None
        assert stored_b.status == BookingStatus.PENDING
        assert stored_b.transaction_id is None

    @pytest.mark.asyncio
    async def test_second_finalize_is_already_finalized(
        self, command_repo: BookingCommandRepoImpl
    ) -> None:
        booking = _new_booking('user-a', ['C7'])
        await command_repo.create_booking(booking=booking)
        await command_repo.finalize_paid(booking=_paid(booking, 'TXN_1'))

        with pytest.raises(AlreadyFinalizedError):
            await command_repo.finalize_paid(booking=_paid(booking, 'TXN_2'))

    @pytest.mark.asyncio
    async def test_concurrent_finalize_on_a_freed_seat_pays_exactly_one(
        self, command_repo: BookingCommandRepoImpl
    ) -> None:
        # Arrange: holder owns C8; both contenders list it without owning it
        holder = _new_booking('user-x', ['C8'])
        contender_a = _new_booking('user-a', ['C8'])
        contender_b = _new_booking('user-b', ['C8'])
        for booking in (holder, contender_a, contender_b):
            await command_repo.create_booking(booking=booking)
        await command_repo.cancel_booking(booking=holder.cancel())

        errors: dict[UUID, Optional[CustomBaseError]] = {}

        async def finalize(booking: Booking, transaction_id: str) -> None:
            try:
                await command_repo.finalize_paid(booking=_paid(booking, transaction_id))
                errors[booking.id] = None
            except CustomBaseError as e:
                errors[booking.id] = e

        # Act
        async with anyio.create_task_group() as tg:
            tg.start_soon(finalize, contender_a, 'TXN_A')
            tg.start_soon(finalize, contender_b, 'TXN_B')

        # Assert
        winners = [booking_id for booking_id, error in errors.items() if error is None]
        losers = [error for error in errors.values() if error is not None]
        assert len(winners) == 1
        assert len(losers) == 1
        assert isinstance(losers[0], SeatConflictError)
        assert losers[0].seat_ids == ['C8']

        owners = await command_repo.get_seat_owners(showtime_id=SHOWTIME_ID, seat_ids=['C8'])
        assert owners == {'C8': winners[0]}
        stored = [
            await command_repo.get_by_id(booking_id=booking_id)
            for booking_id in (contender_a.id, contender_b.id)
        ]
        assert sorted(booking.status for booking in stored if booking) == [
            BookingStatus.PAID,
            BookingStatus.PENDING,
        ]


@pytest.mark.integration
class TestCancelBooking:
    @pytest.mark.asyncio
    async def test_cancel_releases_seats_for_the_next_claimant(
        self, command_repo: BookingCommandRepoImpl
    ) -> None:
        # Arrange
        booking_a = _new_booking('user-a', ['C7', 'C8'])
        booking_b = _new_booking('user-b', ['C8'])
        await command_repo.create_booking(booking=booking_a)
        await command_repo.create_booking(booking=booking_b)

        # Act
        await command_repo.cancel_booking(booking=booking_a.cancel())
        await command_repo.finalize_paid(booking=_paid(booking_b, 'TXN_B'))

        # Assert
        stored_a = await command_repo.get_by_id(booking_id=booking_a.id)
        assert stored_a is not None
        assert stored_a.status == BookingStatus.CANCELLED
        owners = await command_repo.get_seat_owners(
            showtime_id=SHOWTIME_ID, seat_ids=['C7', 'C8']
        )
        assert owners == {'C8': booking_b.id}

    @pytest.mark.asyncio
    async def test_paid_booking_cannot_be_cancelled(
        self, command_repo: BookingCommandRepoImpl
    ) -> None:
        booking = _new_booking('user-a', ['C7'])
        await command_repo.create_booking(booking=booking)
        await command_repo.finalize_paid(booking=_paid(booking, 'TXN_1'))

        with pytest.raises(AlreadyFinalizedError):
            await command_repo.cancel_booking(booking=booking)

    @pytest.mark.asyncio
    async def test_list_stale_pending_only_returns_old_pending(
        self, command_repo: BookingCommandRepoImpl
    ) -> None:
        # Arrange
        now = datetime.now(timezone.utc)
        stale = attrs.evolve(
            _new_booking('user-a', ['A1']), created_at=now - timedelta(hours=1)
        )
        fresh = _new_booking('user-a', ['A2'])
        for booking in (stale, fresh):
            await command_repo.create_booking(booking=booking)

        # Act
        found = await command_repo.list_stale_pending(
            created_before=now - timedelta(minutes=10), limit=10
        )

        # Assert
        assert [booking.id for booking in found] == [stale.id]


@pytest.mark.integration
class TestSeatLedgerQuery:
    @pytest.mark.asyncio
    async def test_taken_seats_cover_pending_and_paid_but_not_cancelled(
        self, command_repo: BookingCommandRepoImpl, ledger_repo: SeatLedgerQueryRepoImpl
    ) -> None:
        # Arrange
        pending = _new_booking('user-a', ['C7', 'C8'])
        overlapping = _new_booking('user-b', ['C8', 'C9'])
        paid = _new_booking('user-c', ['A1'])
        cancelled = _new_booking('user-d', ['H12'])
        elsewhere = _new_booking('user-e', ['B5'], showtime_id=OTHER_SHOWTIME_ID)
        for booking in (pending, overlapping, paid, cancelled, elsewhere):
            await command_repo.create_booking(booking=booking)
        await command_repo.finalize_paid(booking=_paid(paid, 'TXN_C'))
        await command_repo.cancel_booking(booking=cancelled.cancel())

        # Act
        first = await ledger_repo.get_taken_seats(showtime_id=SHOWTIME_ID)
        second = await ledger_repo.get_taken_seats(showtime_id=SHOWTIME_ID)

        # Assert
        assert sorted(first) == ['A1', 'C7', 'C8', 'C9']
        assert sorted(second) == sorted(first)
        assert await ledger_repo.get_taken_seats(showtime_id=OTHER_SHOWTIME_ID) == ['B5']
