from datetime import datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

import anyio

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.cinema_booking.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.cinema_booking.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.cinema_booking.app.interface.i_showtime_lock import IShowtimeLock


class ExpirePendingBookingsUseCase:
    """
    Cancel pending bookings older than a TTL so abandoned checkouts stop
    holding seats.

    Only started when PENDING_BOOKING_TTL_SECONDS is configured.
    """

    def __init__(
        self,
        *,
        booking_command_repo: IBookingCommandRepo,
        showtime_lock: IShowtimeLock,
        ttl_seconds: int,
        batch_size: int = 100,
    ) -> None:
        self.booking_command_repo = booking_command_repo
        self.showtime_lock = showtime_lock
        self.ttl = timedelta(seconds=ttl_seconds)
        self.batch_size = batch_size
        self._cancel = CancelBookingUseCase(
            booking_command_repo=booking_command_repo, showtime_lock=showtime_lock
        )

    @Logger.io
    async def expire_once(self, *, now: Optional[datetime] = None) -> List[UUID]:
        """
        One sweep. Bookings that got paid or cancelled since the scan are skipped.

        Returns:
            Ids of bookings cancelled in this sweep
        """
        created_before = (now or datetime.now(timezone.utc)) - self.ttl
        stale = await self.booking_command_repo.list_stale_pending(
            created_before=created_before, limit=self.batch_size
        )

        expired: List[UUID] = []
        for booking in stale:
            try:
                async with self.showtime_lock.hold(showtime_id=booking.showtime_id):
                    await self._cancel.cancel_locked(booking_id=booking.id)
            except CustomBaseError as e:
                Logger.base.info(f'⏭️ [REAPER] Skipped {booking.id}: {e.reason}')
                continue
            expired.append(booking.id)

        if expired:
            metrics.bookings_expired.inc(len(expired))
            Logger.base.info(f'🧹 [REAPER] Expired {len(expired)} pending booking(s)')
        return expired

    async def run_forever(
        self, *, interval: float = settings.PENDING_BOOKING_REAPER_INTERVAL_SECONDS
    ) -> None:
        Logger.base.info(f'🧹 [REAPER] Started (ttl={self.ttl}, every {interval}s)')
        while True:
            try:
                await self.expire_once()
            except CustomBaseError as e:
                Logger.base.error(f'🧹 [REAPER] Sweep failed: {e.reason}: {e.message}')
            except Exception as e:
                Logger.base.exception(f'🧹 [REAPER] Sweep crashed: {e!r}')
            await anyio.sleep(interval)
