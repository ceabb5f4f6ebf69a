from abc import ABC, abstractmethod
from typing import AsyncContextManager
from uuid import UUID


class IShowtimeLock(ABC):
    """Serializes seat-ownership changes within one showtime across processes."""

    @abstractmethod
    def hold(self, *, showtime_id: UUID) -> AsyncContextManager[None]:
        """
        Raises:
            DataUnavailableError: lock not obtained in time or lock store down
        """
