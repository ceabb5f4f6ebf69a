from abc import ABC, abstractmethod
from typing import List
from uuid import UUID


class ISeatLedgerQueryRepo(ABC):
    @abstractmethod
    async def get_taken_seats(self, *, showtime_id: UUID) -> List[str]:
        """
        Seats held by pending, confirmed or paid bookings of the showtime.

        Raises:
            DataUnavailableError: the store could not be read
        """
