"""
Unit tests for DistributedLock (SET NX PX + compare-and-delete)
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.platform.exception.exceptions import DataUnavailableError
from src.platform.state.distributed_lock import RELEASE_SCRIPT, DistributedLock


@pytest.fixture
def redis_client() -> MagicMock:
    client = MagicMock()
    client.set = AsyncMock(return_value=True)
    client.eval = AsyncMock(return_value=1)
    return client


@pytest.fixture
def lock(redis_client: MagicMock) -> DistributedLock:
    return DistributedLock(client_getter=lambda: redis_client)


@pytest.mark.unit
class TestDistributedLock:
    @pytest.mark.asyncio
    async def test_acquire_and_release_with_owner_token(
        self, lock: DistributedLock, redis_client: MagicMock
    ) -> None:
        # Act
        token = await lock.try_acquire(key='k', ttl=1.5)
        released = await lock.release_lock(key='k', token=token or '')

        # Assert
        assert token
        redis_client.set.assert_awaited_once_with('k', token, nx=True, px=1500)
        redis_client.eval.assert_awaited_once_with(RELEASE_SCRIPT, 1, 'k', token)
        assert released

    @pytest.mark.asyncio
    async def test_acquire_returns_none_when_held(
        self, lock: DistributedLock, redis_client: MagicMock
    ) -> None:
        redis_client.set.return_value = None

        assert await lock.try_acquire(key='k', ttl=1) is None

    @pytest.mark.asyncio
    async def test_acquire_waits_for_release(
        self, lock: DistributedLock, redis_client: MagicMock
    ) -> None:
        # Arrange - held for two attempts, then free
        redis_client.set.side_effect = [None, None, True]

        # Act
        token = await lock.acquire_lock(key='k', ttl=1, wait=1, retry_interval=0.001)

        # Assert
        assert token
        assert redis_client.set.await_count == 3

    @pytest.mark.asyncio
    async def test_store_down_is_data_unavailable(
        self, lock: DistributedLock, redis_client: MagicMock
    ) -> None:
        redis_client.set.side_effect = RedisConnectionError('refused')

        with pytest.raises(DataUnavailableError):
            await lock.try_acquire(key='k', ttl=1)

    @pytest.mark.asyncio
    async def test_hold_releases_on_error(
        self, lock: DistributedLock, redis_client: MagicMock
    ) -> None:
        with pytest.raises(RuntimeError):
            async with lock.hold(key='k', ttl=1, wait=0):
                raise RuntimeError('boom')

        redis_client.eval.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_expired_lock_release_reports_false(
        self, lock: DistributedLock, redis_client: MagicMock
    ) -> None:
        redis_client.eval.return_value = 0

        assert not await lock.release_lock(key='k', token='stale')
