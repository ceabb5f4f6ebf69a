"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.cinema_booking.app.command import (
    cancel_booking_use_case,
    create_booking_use_case,
    finalize_payment_use_case,
)
from src.service.cinema_booking.app.query import (
    get_booking_use_case,
    get_showtime_use_case,
    get_taken_seats_use_case,
    list_bookings_use_case,
)
from src.service.cinema_booking.driving_adapter.http_controller.auth import current_user


WIRE_MODULES: list[ModuleType] = [
    create_booking_use_case,
    finalize_payment_use_case,
    cancel_booking_use_case,
    get_booking_use_case,
    list_bookings_use_case,
    get_showtime_use_case,
    get_taken_seats_use_case,
    current_user,
]
