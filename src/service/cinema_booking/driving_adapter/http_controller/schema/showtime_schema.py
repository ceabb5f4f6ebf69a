from datetime import date, time
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel


class ShowtimeResponse(BaseModel):
    id: UUID
    movie_id: UUID
    theater_id: UUID
    show_date: date
    show_time: time
    price: int
    movie_title: Optional[str] = None
    theater_name: Optional[str] = None
    theater_city: Optional[str] = None


class TakenSeatsResponse(BaseModel):
    """Seat ledger snapshot for one showtime"""

    showtime_id: UUID
    rows: List[str]
    seats_per_row: int
    taken_seats: List[str]

    model_config = {
        'json_schema_extra': {
            'example': {
                'showtime_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'rows': ['A', 'B', 'C', 'D', 'E', 'F', 'G', 'H'],
                'seats_per_row': 12,
                'taken_seats': ['A1', 'C7', 'C8'],
            }
        }
    }
