"""Cinema booking domain value objects"""

from src.service.cinema_booking.domain.value_object.charge_amount import (
    expected_charge,
    to_whole_units,
    validate_claimed_amount,
)
from src.service.cinema_booking.domain.value_object.seat_map import (
    SeatId,
    SeatMap,
    seat_sort_key,
    sort_seat_ids,
)

__all__ = [
    'SeatId',
    'SeatMap',
    'expected_charge',
    'seat_sort_key',
    'sort_seat_ids',
    'to_whole_units',
    'validate_claimed_amount',
]
