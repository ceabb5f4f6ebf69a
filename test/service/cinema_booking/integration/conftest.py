"""
PostgreSQL fixtures for repository integration tests.

The test database (POSTGRES_DB, set in test/conftest.py) is created if missing
and its schema rebuilt from the ORM models once per session. Every test starts
from empty tables with two catalog showtimes. Tests are skipped when no
PostgreSQL server is reachable.
"""

from datetime import date, time
from typing import AsyncGenerator, Optional
from uuid import UUID

import pytest
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import create_async_engine

from src.platform.config.core_setting import settings
from src.platform.database.orm_db_setting import (
    Base,
    Database,
    dispose_engines,
    get_engine,
    get_session_maker,
)
from src.service.cinema_booking.driven_adapter.model import (
    MovieModel,
    ShowtimeModel,
    TheaterModel,
)
from src.service.cinema_booking.driven_adapter.repo.booking_command_repo_impl import (
    BookingCommandRepoImpl,
)
from src.service.cinema_booking.driven_adapter.repo.seat_ledger_query_repo_impl import (
    SeatLedgerQueryRepoImpl,
)


SHOWTIME_ID = UUID('01936d8f-5e73-7c4e-a9c5-000000000001')
OTHER_SHOWTIME_ID = UUID('01936d8f-5e73-7c4e-a9c5-000000000002')
MOVIE_ID = UUID('01936d8f-5e73-7c4e-a9c5-0000000000a1')
THEATER_ID = UUID('01936d8f-5e73-7c4e-a9c5-0000000000b1')

_TABLES = ('seat_lock', 'booking', 'showtime', 'theater', 'movie')

_schema_ready = False
_unavailable_reason: Optional[str] = None


async def _setup_test_database() -> None:
    admin_url = settings.DATABASE_URL_ASYNC.replace(f'/{settings.POSTGRES_DB}', '/postgres')
    admin_engine = create_async_engine(admin_url, isolation_level='AUTOCOMMIT')
    try:
        async with admin_engine.connect() as conn:
            result = await conn.execute(
                text('SELECT 1 FROM pg_database WHERE datname = :name'),
                {'name': settings.POSTGRES_DB},
            )
            if not result.fetchone():
                await conn.execute(text(f'CREATE DATABASE "{settings.POSTGRES_DB}"'))
    finally:
        await admin_engine.dispose()

    async with get_engine().begin() as conn:
        await conn.execute(text('DROP SCHEMA public CASCADE'))
        await conn.execute(text('CREATE SCHEMA public'))
        await conn.run_sync(Base.metadata.create_all)


async def _reset_tables() -> None:
    async with get_engine().begin() as conn:
        await conn.execute(text(f'TRUNCATE {", ".join(_TABLES)} CASCADE'))

    async with get_session_maker()() as session, session.begin():
        session.add(MovieModel(id=MOVIE_ID, title='Inception'))
        session.add(
            TheaterModel(id=THEATER_ID, name='Cineplex Central', city='Mumbai', location='Parel')
        )
        await session.flush()
        for showtime_id in (SHOWTIME_ID, OTHER_SHOWTIME_ID):
            session.add(
                ShowtimeModel(
                    id=showtime_id,
                    movie_id=MOVIE_ID,
                    theater_id=THEATER_ID,
                    show_date=date(2025, 1, 12),
                    show_time=time(20, 0),
                    price=250,
                )
            )


@pytest.fixture
async def clean_database() -> AsyncGenerator[None, None]:
    global _schema_ready, _unavailable_reason

    if _unavailable_reason:
        pytest.skip(_unavailable_reason)
    try:
        if not _schema_ready:
            await _setup_test_database()
            _schema_ready = True
        await _reset_tables()
    except (OSError, SQLAlchemyError) as e:
        await dispose_engines()
        _unavailable_reason = f'PostgreSQL not available: {e!r}'
        pytest.skip(_unavailable_reason)

    yield

    await dispose_engines()


@pytest.fixture
def command_repo(clean_database) -> BookingCommandRepoImpl:
    return BookingCommandRepoImpl(Database(read_only=False).session)


@pytest.fixture
def ledger_repo(clean_database) -> SeatLedgerQueryRepoImpl:
    return SeatLedgerQueryRepoImpl(Database(read_only=True).session)
