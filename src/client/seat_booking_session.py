"""
One user's seat selection and checkout for one showtime.

Flow:
1. open() takes a first ledger snapshot and starts polling every few seconds
2. toggle() seats until the selection is complete
3. book() creates a pending booking, pay() finalizes it

Everything here is advisory. Seat ownership is decided when the server
finalizes the payment.
"""

from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any, AsyncIterator, Dict, List, Optional
from uuid import UUID

import anyio

from src.client.cinema_booking_api_client import CinemaBookingApiClient
from src.client.seat_ledger_poller import SeatLedgerPoller
from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import DataUnavailableError, DomainError
from src.platform.logging.loguru_io import Logger
from src.service.cinema_booking.app.dto import TransactionResult
from src.service.cinema_booking.domain.seat_selector import SeatSelector
from src.service.cinema_booking.domain.value_object.charge_amount import expected_charge
from src.service.cinema_booking.domain.value_object.seat_map import SeatMap


class SeatBookingSession:
    def __init__(
        self,
        *,
        api: CinemaBookingApiClient,
        showtime_id: UUID,
        seat_count: int,
        seat_price: int,
        seat_map: Optional[SeatMap] = None,
        poll_interval: float = settings.SEAT_LEDGER_POLL_INTERVAL_SECONDS,
        surcharge_rate: Decimal = settings.SERVICE_SURCHARGE_RATE,
    ) -> None:
        self.api = api
        self.showtime_id = showtime_id
        self.seat_price = seat_price
        self.surcharge_rate = surcharge_rate
        self.selector = SeatSelector(capacity=seat_count, seat_map=seat_map or SeatMap.default())
        self.poller = SeatLedgerPoller(
            api=api, showtime_id=showtime_id, selector=self.selector, interval=poll_interval
        )

    @asynccontextmanager
    async def open(self) -> AsyncIterator['SeatBookingSession']:
        async with anyio.create_task_group() as tg:
            await self.poller.refresh_once()
            tg.start_soon(self.poller.poll_forever)
            try:
                yield self
            finally:
                tg.cancel_scope.cancel()

    @property
    def seat_count(self) -> int:
        return self.selector.capacity

    @property
    def total_amount(self) -> int:
        return self.seat_price * self.seat_count

    @property
    def amount_due(self) -> int:
        return expected_charge(self.total_amount, surcharge_rate=self.surcharge_rate)

    @property
    def can_book(self) -> bool:
        return self.poller.is_available and self.selector.is_complete

    def toggle(self, seat_id: str) -> List[str]:
        return self.selector.toggle(seat_id)

    async def book(self) -> Dict[str, Any]:
        """
        Raises:
            DataUnavailableError: last ledger read failed, availability unknown
            DomainError: selection incomplete
        """
        if not self.poller.is_available:
            raise DataUnavailableError('Seat availability is unknown, please wait for a refresh')
        if not self.selector.is_complete:
            raise DomainError(f'Select {self.selector.remaining} more seat(s)')

        booking = await self.api.create_booking(
            showtime_id=self.showtime_id,
            seat_ids=self.selector.current_selection(),
            seat_count=self.seat_count,
            total_amount=self.total_amount,
        )
        Logger.base.info(
            f'📝 [SESSION] Booking {booking["id"]} created for {booking["seat_ids"]}'
        )
        return booking

    async def pay(
        self,
        *,
        booking_id: UUID,
        payment_method: str,
        movie_title: Optional[str] = None,
        show_date: Optional[str] = None,
    ) -> TransactionResult:
        result = await self.api.finalize_payment(
            booking_id=booking_id,
            amount=self.amount_due,
            payment_method=payment_method,
            movie_title=movie_title,
            seat_count=self.seat_count,
            show_date=show_date,
        )
        if result.conflicting_seats:
            # Someone else got there first; show it now rather than at the next poll
            await self.poller.refresh_once()
        return result
