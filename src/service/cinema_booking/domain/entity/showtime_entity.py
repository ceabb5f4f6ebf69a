from datetime import date, time
from typing import Optional
from uuid import UUID

import attrs


@attrs.define(frozen=True)
class Showtime:
    """Catalog showtime, read-only to this service."""

    id: UUID
    movie_id: UUID
    theater_id: UUID
    show_date: date
    show_time: time
    price: int
    movie_title: Optional[str] = None
    theater_name: Optional[str] = None
    theater_city: Optional[str] = None
