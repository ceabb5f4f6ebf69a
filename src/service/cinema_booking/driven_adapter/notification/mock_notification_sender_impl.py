from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict

from src.platform.logging.loguru_io import Logger
from src.service.cinema_booking.app.interface.i_notification_sender import INotificationSender
from src.service.cinema_booking.domain.entity.booking_entity import Booking


class MockNotificationSenderImpl(INotificationSender):
    """Logs confirmations instead of emailing them; keeps the most recent for inspection."""

    def __init__(self, *, history_size: int = 100) -> None:
        self.sent: Deque[Dict[str, Any]] = deque(maxlen=history_size)

    @staticmethod
    def build_message(*, booking: Booking, movie_title: str, show_date: str) -> str:
        method = booking.payment_method.label if booking.payment_method else 'card'
        when = f' on {show_date}' if show_date else ''
        return (
            f'Confirmation email sent for {booking.seat_count} seat(s) to '
            f'"{movie_title}"{when}. Paid via {method}.'
        )

    @Logger.io
    async def send_payment_confirmation(
        self, *, booking: Booking, movie_title: str, show_date: str
    ) -> None:
        message = self.build_message(booking=booking, movie_title=movie_title, show_date=show_date)
        self.sent.append(
            {
                'user_id': booking.user_id,
                'booking_id': booking.id,
                'message': message,
                'sent_at': datetime.now(timezone.utc),
            }
        )
        Logger.base.info(f'📧 [NOTIFY] {booking.user_id}: {message}')
