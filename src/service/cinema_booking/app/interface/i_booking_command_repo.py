from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from src.service.cinema_booking.domain.entity.booking_entity import Booking


class IBookingCommandRepo(ABC):
    """
    Booking writes plus the primary-database reads they depend on.

    Every method uses the primary database so finalization never decides on
    replica-lagged data.
    """

    @abstractmethod
    async def create_booking(self, *, booking: Booking) -> List[str]:
        """
        Insert a pending booking and claim its free seats in one transaction.

        Seats already owned by another booking are left with their owner.

        Returns:
            Seat ids that were already owned by another booking

        Raises:
            PersistenceError: storage failure, nothing written
        """

    @abstractmethod
    async def get_by_id(self, *, booking_id: UUID) -> Optional[Booking]:
        pass

    @abstractmethod
    async def get_seat_owners(self, *, showtime_id: UUID, seat_ids: List[str]) -> Dict[str, UUID]:
        """Map each claimed seat among `seat_ids` to the booking that owns it."""

    @abstractmethod
    async def finalize_paid(self, *, booking: Booking) -> Booking:
        """
        Atomically claim the booking's remaining seats and move it to paid.

        Args:
            booking: Booking already transitioned to paid in memory

        Raises:
            SeatConflictError: another booking owns one of the seats
            AlreadyFinalizedError: the stored booking is no longer pending
            PersistenceError: storage failure, nothing written
        """

    @abstractmethod
    async def cancel_booking(self, *, booking: Booking) -> Booking:
        """
        Move a pending booking to cancelled and release its seat claims.

        Raises:
            AlreadyFinalizedError: the stored booking is no longer pending
            PersistenceError: storage failure, nothing written
        """

    @abstractmethod
    async def list_stale_pending(self, *, created_before: datetime, limit: int) -> List[Booking]:
        pass
