from abc import ABC, abstractmethod

from src.service.cinema_booking.domain.entity.booking_entity import Booking


class INotificationSender(ABC):
    @abstractmethod
    async def send_payment_confirmation(
        self, *, booking: Booking, movie_title: str, show_date: str
    ) -> None:
        """Fire-and-forget; callers log failures and move on."""
