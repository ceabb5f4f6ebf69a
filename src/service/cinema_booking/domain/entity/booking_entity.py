from datetime import datetime, timezone
from enum import StrEnum
from typing import List, Optional
from uuid import UUID

import attrs

from src.platform.exception.exceptions import AlreadyFinalizedError, DomainError
from src.platform.logging.loguru_io import Logger
from src.service.cinema_booking.domain.value_object.seat_map import SeatMap


class BookingStatus(StrEnum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'  # Never produced here; still counts as taken
    PAID = 'paid'
    CANCELLED = 'cancelled'


# Statuses whose seats count as taken in the seat ledger
TAKEN_STATUSES = frozenset({BookingStatus.PENDING, BookingStatus.CONFIRMED, BookingStatus.PAID})


class PaymentMethod(StrEnum):
    DEBIT = 'debit'
    CREDIT = 'credit'
    UPI = 'upi'

    @property
    def label(self) -> str:
        return {
            PaymentMethod.DEBIT: 'Debit Card',
            PaymentMethod.CREDIT: 'Credit Card',
            PaymentMethod.UPI: 'UPI',
        }[self]


@attrs.define
class Booking:
    id: UUID
    user_id: str
    showtime_id: UUID
    seat_ids: List[str]
    seat_count: int
    total_amount: int
    status: BookingStatus = BookingStatus.PENDING
    payment_method: Optional[PaymentMethod] = None
    transaction_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        id: UUID,
        user_id: str,
        showtime_id: UUID,
        seat_ids: List[str],
        seat_count: int,
        total_amount: int,
        seat_map: SeatMap,
        max_seats: int,
    ) -> 'Booking':
        if not 1 <= seat_count <= max_seats:
            raise DomainError(f'seat_count must be between 1 and {max_seats}')
        if len(seat_ids) != seat_count:
            raise DomainError('seat_count must match the number of selected seats')
        if len(set(seat_ids)) != len(seat_ids):
            raise DomainError('Duplicate seats in booking')
        if invalid := [seat_id for seat_id in seat_ids if not seat_map.contains(seat_id)]:
            raise DomainError(f'Unknown seats: {", ".join(invalid)}')
        if total_amount <= 0:
            raise DomainError('total_amount must be positive')

        now = datetime.now(timezone.utc)
        return cls(
            id=id,
            user_id=user_id,
            showtime_id=showtime_id,
            seat_ids=list(seat_ids),
            seat_count=seat_count,
            total_amount=total_amount,
            status=BookingStatus.PENDING,
            created_at=now,
            updated_at=now,
        )

    @property
    def is_seat_holding(self) -> bool:
        return self.status in TAKEN_STATUSES

    @Logger.io
    def validate_can_be_paid(self) -> None:
        """
        Raises:
            AlreadyFinalizedError: booking is no longer pending
        """
        if self.status == BookingStatus.PAID:
            raise AlreadyFinalizedError('Booking already paid')
        elif self.status == BookingStatus.CONFIRMED:
            raise AlreadyFinalizedError('Booking already confirmed')
        elif self.status == BookingStatus.CANCELLED:
            raise AlreadyFinalizedError('Cannot pay for cancelled booking')

    @Logger.io
    def mark_as_paid(self, *, transaction_id: str, payment_method: PaymentMethod) -> 'Booking':
        self.validate_can_be_paid()
        now = datetime.now(timezone.utc)
        return attrs.evolve(
            self,
            status=BookingStatus.PAID,
            transaction_id=transaction_id,
            payment_method=payment_method,
            paid_at=now,
            updated_at=now,
        )

    @Logger.io
    def cancel(self) -> 'Booking':
        """
        Only pending bookings can be cancelled.

        Raises:
            AlreadyFinalizedError: booking is paid, confirmed or already cancelled
        """
        if self.status == BookingStatus.PAID:
            raise AlreadyFinalizedError('Cannot cancel a paid booking')
        elif self.status == BookingStatus.CONFIRMED:
            raise AlreadyFinalizedError('Cannot cancel a confirmed booking')
        elif self.status == BookingStatus.CANCELLED:
            raise AlreadyFinalizedError('Booking already cancelled')

        return attrs.evolve(
            self, status=BookingStatus.CANCELLED, updated_at=datetime.now(timezone.utc)
        )
