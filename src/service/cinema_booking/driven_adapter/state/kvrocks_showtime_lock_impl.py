from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import UUID

from src.platform.config.core_setting import settings
from src.platform.state.distributed_lock import DistributedLock
from src.service.cinema_booking.app.interface.i_showtime_lock import IShowtimeLock


def showtime_lock_key(showtime_id: UUID) -> str:
    return f'{settings.KVROCKS_KEY_PREFIX}lock:showtime:{showtime_id}:finalize'


class KvrocksShowtimeLockImpl(IShowtimeLock):
    """
    Per-showtime mutex held across ownership check, charge and commit.

    TTL outlives the gateway timeout so the lock cannot lapse mid-charge under
    normal operation. The seat_lock primary key still holds if it does.
    """

    def __init__(
        self,
        *,
        distributed_lock: DistributedLock,
        ttl: float = settings.FINALIZE_LOCK_TTL_SECONDS,
        wait: float = settings.FINALIZE_LOCK_WAIT_SECONDS,
        retry_interval: float = settings.FINALIZE_LOCK_RETRY_INTERVAL_SECONDS,
    ) -> None:
        self.distributed_lock = distributed_lock
        self.ttl = ttl
        self.wait = wait
        self.retry_interval = retry_interval

    @asynccontextmanager
    async def hold(self, *, showtime_id: UUID) -> AsyncIterator[None]:
        async with self.distributed_lock.hold(
            key=showtime_lock_key(showtime_id),
            ttl=self.ttl,
            wait=self.wait,
            retry_interval=self.retry_interval,
        ):
            yield
