from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.service.cinema_booking.domain.entity.showtime_entity import Showtime


class IShowtimeQueryRepo(ABC):
    """Read-only access to the showtime catalog"""

    @abstractmethod
    async def get_by_id(self, *, showtime_id: UUID) -> Optional[Showtime]:
        pass
