from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from src.service.cinema_booking.domain.entity.booking_entity import Booking


class BookingCreateRequest(BaseModel):
    showtime_id: UUID
    seat_ids: List[str] = Field(min_length=1)
    seat_count: int
    total_amount: int

    model_config = {
        'json_schema_extra': {
            'example': {
                'showtime_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'seat_ids': ['C7', 'C8'],
                'seat_count': 2,
                'total_amount': 500,
            }
        }
    }


class BookingResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': '01936d8f-6a10-7b2e-8c4d-abcdef012345',
                'user_id': 'user-42',
                'showtime_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'seat_ids': ['C7', 'C8'],
                'seat_count': 2,
                'total_amount': 500,
                'status': 'pending',
                'payment_method': None,
                'transaction_id': None,
                'created_at': '2025-01-10T10:30:00Z',
                'paid_at': None,
            }
        },
    }

    id: UUID
    user_id: str
    showtime_id: UUID
    seat_ids: List[str]
    seat_count: int
    total_amount: int
    status: str
    payment_method: Optional[str] = None
    transaction_id: Optional[str] = None
    created_at: Optional[datetime] = None
    paid_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, booking: Booking) -> 'BookingResponse':
        return cls(
            id=booking.id,
            user_id=booking.user_id,
            showtime_id=booking.showtime_id,
            seat_ids=booking.seat_ids,
            seat_count=booking.seat_count,
            total_amount=booking.total_amount,
            status=booking.status.value,
            payment_method=booking.payment_method.value if booking.payment_method else None,
            transaction_id=booking.transaction_id,
            created_at=booking.created_at,
            paid_at=booking.paid_at,
        )


class CancelBookingResponse(BaseModel):
    status: str
    released_seats: List[str]

    model_config = {
        'json_schema_extra': {'example': {'status': 'cancelled', 'released_seats': ['C7', 'C8']}}
    }
