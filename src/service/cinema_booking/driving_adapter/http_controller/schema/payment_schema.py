from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class PaymentRequest(BaseModel):
    booking_id: UUID
    amount: float = Field(gt=0)
    payment_method: Literal['debit', 'credit', 'upi']
    movie_title: Optional[str] = None
    seat_count: Optional[int] = None  # display only, the booking's own count is authoritative
    show_date: Optional[str] = None

    model_config = {
        'json_schema_extra': {
            'example': {
                'booking_id': '01936d8f-6a10-7b2e-8c4d-abcdef012345',
                'amount': 525,
                'payment_method': 'upi',
                'movie_title': 'Inception',
                'seat_count': 2,
                'show_date': '2025-01-12',
            }
        }
    }


class PaymentSuccessResponse(BaseModel):
    success: Literal[True] = True
    transaction_id: str
    message: str


class PaymentFailureResponse(BaseModel):
    success: Literal[False] = False
    reason: str
    error: str
    conflicting_seats: Optional[List[str]] = None
