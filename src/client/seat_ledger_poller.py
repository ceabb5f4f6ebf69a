"""
Keeps a seat selection session's view of taken seats fresh.

A failed read keeps the previous snapshot and marks the ledger unavailable
until the next successful read; callers must not book while it is.
"""

import time
from typing import Optional
from uuid import UUID

import anyio

from src.client.cinema_booking_api_client import CinemaBookingApiClient
from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io import Logger
from src.service.cinema_booking.domain.seat_selector import SeatSelector


class SeatLedgerPoller:
    def __init__(
        self,
        *,
        api: CinemaBookingApiClient,
        showtime_id: UUID,
        selector: SeatSelector,
        interval: float = settings.SEAT_LEDGER_POLL_INTERVAL_SECONDS,
    ) -> None:
        self.api = api
        self.showtime_id = showtime_id
        self.selector = selector
        self.interval = interval
        self.taken: frozenset[str] = frozenset()
        self.is_available = False
        self.last_refreshed_at: Optional[float] = None

    async def refresh_once(self) -> bool:
        """
        Returns:
            True if the snapshot was replaced, False if the read failed
        """
        try:
            taken = await self.api.get_taken_seats(showtime_id=self.showtime_id)
        except CustomBaseError as e:
            if self.is_available:
                Logger.base.warning(
                    f'📡 [POLLER] Ledger for {self.showtime_id} unavailable: {e.message}'
                )
            self.is_available = False
            return False

        self.taken = frozenset(taken)
        self.is_available = True
        self.last_refreshed_at = time.monotonic()
        if dropped := self.selector.update_taken(self.taken):
            Logger.base.info(f'🪑 [POLLER] Deselected seats taken meanwhile: {dropped}')
        return True

    async def poll_forever(self) -> None:
        """Refresh every `interval` seconds until cancelled. Does not refresh up front."""
        while True:
            await anyio.sleep(self.interval)
            await self.refresh_once()
