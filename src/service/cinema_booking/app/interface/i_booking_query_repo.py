from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.service.cinema_booking.domain.entity.booking_entity import Booking, BookingStatus


class IBookingQueryRepo(ABC):
    """Repository interface for booking read operations"""

    @abstractmethod
    async def get_by_id(self, *, booking_id: UUID) -> Optional[Booking]:
        pass

    @abstractmethod
    async def list_user_bookings(
        self, *, user_id: str, status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        """User's bookings, newest first."""
