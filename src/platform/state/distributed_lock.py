"""
Distributed lock on Kvrocks (Redis protocol).

`SET key token NX PX ttl` to acquire, compare-and-delete Lua script to release,
so a holder whose lock expired can never delete a lock someone else now holds.
"""

from contextlib import asynccontextmanager
import time
from typing import AsyncIterator, Callable, Optional
from uuid import uuid4

import anyio
from redis.asyncio import Redis as AsyncRedis
from redis.exceptions import RedisError

from src.platform.exception.exceptions import DataUnavailableError
from src.platform.logging.loguru_io import Logger
from src.platform.state.kvrocks_client import kvrocks_client


RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class DistributedLock:
    def __init__(self, *, client_getter: Callable[[], AsyncRedis] = kvrocks_client.get_client):
        self._client_getter = client_getter

    async def try_acquire(self, *, key: str, ttl: float) -> Optional[str]:
        """
        Single acquisition attempt.

        Returns:
            Owner token if acquired, None if the key is already held

        Raises:
            DataUnavailableError: Kvrocks unreachable
        """
        token = str(uuid4())
        try:
            acquired = await self._client_getter().set(key, token, nx=True, px=int(ttl * 1000))
        except RedisError as e:
            raise DataUnavailableError(f'Lock store unavailable: {e}') from e
        if acquired:
            Logger.base.debug(f'🔒 [LOCK] Acquired {key} (ttl={ttl}s)')
            return token
        return None

    async def acquire_lock(
        self, *, key: str, ttl: float, wait: float = 0.0, retry_interval: float = 0.05
    ) -> Optional[str]:
        """
        Acquire `key`, polling until `wait` seconds have passed.

        Returns:
            Owner token, or None when the wait budget ran out
        """
        deadline = time.monotonic() + wait
        while True:
            if token := await self.try_acquire(key=key, ttl=ttl):
                return token
            if time.monotonic() >= deadline:
                Logger.base.warning(f'⏳ [LOCK] Gave up waiting for {key} after {wait}s')
                return None
            await anyio.sleep(retry_interval)

    async def release_lock(self, *, key: str, token: str) -> bool:
        try:
            released = await self._client_getter().eval(RELEASE_SCRIPT, 1, key, token)  # type: ignore[misc]
        except RedisError as e:
            # The TTL reclaims the key; nothing else to undo
            Logger.base.error(f'❌ [LOCK] Error releasing {key}: {e}')
            return False
        if released:
            Logger.base.debug(f'🔓 [LOCK] Released {key}')
            return True
        Logger.base.warning(f'⚠️ [LOCK] {key} expired before release')
        return False

    @asynccontextmanager
    async def hold(
        self, *, key: str, ttl: float, wait: float, retry_interval: float = 0.05
    ) -> AsyncIterator[str]:
        """
        Raises:
            DataUnavailableError: lock not obtained within `wait` seconds
        """
        token = await self.acquire_lock(key=key, ttl=ttl, wait=wait, retry_interval=retry_interval)
        if token is None:
            raise DataUnavailableError('Seat data is busy, please retry')
        try:
            yield token
        finally:
            with anyio.CancelScope(shield=True):
                await self.release_lock(key=key, token=token)
