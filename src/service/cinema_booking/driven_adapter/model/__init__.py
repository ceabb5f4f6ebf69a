from src.service.cinema_booking.driven_adapter.model.booking_model import BookingModel
from src.service.cinema_booking.driven_adapter.model.catalog_model import (
    MovieModel,
    ShowtimeModel,
    TheaterModel,
)
from src.service.cinema_booking.driven_adapter.model.seat_lock_model import SeatLockModel

__all__ = ['BookingModel', 'MovieModel', 'SeatLockModel', 'ShowtimeModel', 'TheaterModel']
