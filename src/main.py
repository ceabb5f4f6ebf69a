"""
Production FastAPI Application

Cinema booking API plus the optional pending-booking reaper.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import create_db_and_tables, dispose_engines, get_engine
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.platform.state.kvrocks_client import kvrocks_client
from src.service.cinema_booking.app.command.expire_pending_bookings_use_case import (
    ExpirePendingBookingsUseCase,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('🚀 [Cinema Booking] Starting up...')

    tracing = TracingConfig(service_name='cinema-booking')
    tracing.setup()
    Logger.base.info('📊 [Cinema Booking] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Cinema Booking] Dependency injection wired')

    tracing.instrument_sqlalchemy(engine=get_engine())
    tracing.instrument_redis()

    await create_db_and_tables()
    Logger.base.info('🗄️  [Cinema Booking] Database schema ensured')

    # Fail fast: finalize cannot run without the lock store
    await kvrocks_client.initialize()
    Logger.base.info('📡 [Cinema Booking] Kvrocks initialized')

    async with anyio.create_task_group() as tg:
        if settings.PENDING_BOOKING_TTL_SECONDS:
            reaper = ExpirePendingBookingsUseCase(
                booking_command_repo=container.booking_command_repo(),
                showtime_lock=container.showtime_lock(),
                ttl_seconds=settings.PENDING_BOOKING_TTL_SECONDS,
            )
            tg.start_soon(reaper.run_forever)

        Logger.base.info('✅ [Cinema Booking] Ready to serve requests')
        yield

        Logger.base.info('🛑 [Cinema Booking] Shutting down...')
        tg.cancel_scope.cancel()

    await dispose_engines()
    Logger.base.info('🗄️  [Cinema Booking] Database engines disposed')

    await kvrocks_client.disconnect()
    Logger.base.info('📡 [Cinema Booking] Kvrocks disconnected')

    tracing.shutdown()
    container.unwire()

    Logger.base.info('👋 [Cinema Booking] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
