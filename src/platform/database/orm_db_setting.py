"""
SQLAlchemy async engine and session management with read/write separation.

- Write sessions always use the primary database. Every step of payment
  finalization reads and writes through them.
- Read sessions use the replica when POSTGRES_REPLICA_SERVER is configured,
  otherwise they fall back to the primary. Only the seat ledger and listing
  queries use them.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


class AsyncEngineManager:
    """
    Lazily builds one write engine and one read engine per event loop.

    Engines bound to a previous loop (e.g. between test sessions) are dropped
    so connections never cross loops.
    """

    def __init__(self) -> None:
        self._engines: dict[bool, AsyncEngine] = {}
        self._session_makers: dict[bool, async_sessionmaker[AsyncSession]] = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def _ensure_loop(self) -> None:
        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        if self._loop is current_loop:
            return
        if self._engines:
            Logger.base.warning('🔄 [DB] Event loop changed, rebuilding engines')
        self._engines.clear()
        self._session_makers.clear()
        self._loop = current_loop

    def get_engine(self, *, read_only: bool = False) -> AsyncEngine:
        self._ensure_loop()
        if read_only not in self._engines:
            url = settings.DATABASE_READ_URL_ASYNC if read_only else settings.DATABASE_URL_ASYNC
            pool_size = settings.DB_POOL_SIZE_READ if read_only else settings.DB_POOL_SIZE_WRITE
            Logger.base.info(f'🔗 [DB] Creating {"read" if read_only else "write"} engine')
            self._engines[read_only] = create_async_engine(
                url,
                echo=False,
                pool_size=pool_size,
                max_overflow=settings.DB_POOL_MAX_OVERFLOW,
                pool_timeout=settings.DB_POOL_TIMEOUT,
                pool_recycle=settings.DB_POOL_RECYCLE,
                pool_pre_ping=settings.DB_POOL_PRE_PING,
            )
        return self._engines[read_only]

    def get_session_maker(self, *, read_only: bool = False) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine(read_only=read_only)
        if read_only not in self._session_makers:
            self._session_makers[read_only] = async_sessionmaker(
                engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_makers[read_only]

    async def dispose(self) -> None:
        for engine in self._engines.values():
            await engine.dispose()
        self._engines.clear()
        self._session_makers.clear()


_engine_manager = AsyncEngineManager()


def get_engine(*, read_only: bool = False) -> AsyncEngine:
    return _engine_manager.get_engine(read_only=read_only)


def get_session_maker(*, read_only: bool = False) -> async_sessionmaker[AsyncSession]:
    return _engine_manager.get_session_maker(read_only=read_only)


async def dispose_engines() -> None:
    await _engine_manager.dispose()


class Base(DeclarativeBase):
    pass


async def create_db_and_tables() -> None:
    """Create tables that don't exist yet (idempotent)."""
    # Register every mapped table on Base.metadata
    import src.service.cinema_booking.driven_adapter.model  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
    Logger.base.info('🗄️ [DB] Tables ensured')


class Database:
    """
    Session provider for dependency injection.

    Args:
        read_only: If True, sessions come from the read replica engine
    """

    def __init__(self, *, read_only: bool = False) -> None:
        self._read_only = read_only

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session_maker = get_session_maker(read_only=self._read_only)
        async with session_maker() as session:
            yield session
