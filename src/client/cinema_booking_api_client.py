"""
HTTP client for the cinema booking API, used by seat selection sessions.

Error responses are turned back into the server's exception types by `reason`,
so callers handle the same taxonomy on both sides of the wire.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

import httpx
import orjson

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import (
    AlreadyFinalizedError,
    AmountMismatchError,
    CustomBaseError,
    DataUnavailableError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    PaymentDeclinedError,
    PersistenceError,
    SeatConflictError,
    UnauthenticatedError,
)
from src.platform.logging.loguru_io import Logger
from src.service.cinema_booking.app.dto import TransactionResult


_ERRORS_BY_REASON: Dict[str, type[CustomBaseError]] = {
    error_cls.reason: error_cls
    for error_cls in (
        DomainError,
        UnauthenticatedError,
        ForbiddenError,
        NotFoundError,
        AlreadyFinalizedError,
        AmountMismatchError,
        PaymentDeclinedError,
        PersistenceError,
        DataUnavailableError,
    )
}


def error_from_response(response: httpx.Response) -> CustomBaseError:
    try:
        body = orjson.loads(response.content)
    except orjson.JSONDecodeError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    reason = body.get('reason', '')
    detail = body.get('detail') or body.get('error') or response.reason_phrase
    message = detail if isinstance(detail, str) else str(detail)

    if reason == SeatConflictError.reason:
        return SeatConflictError(list(body.get('conflicting_seats') or []), message)
    if error_cls := _ERRORS_BY_REASON.get(reason):
        return error_cls(message)
    if response.status_code >= 500:
        return DataUnavailableError(message)
    return CustomBaseError(message, response.status_code)


class CinemaBookingApiClient:
    def __init__(
        self,
        *,
        base_url: str = settings.API_BASE_URL,
        token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {'Authorization': f'Bearer {token}'} if token else {}
        self._client = httpx.AsyncClient(
            base_url=base_url, headers=headers, timeout=timeout, transport=transport
        )

    async def __aenter__(self) -> 'CinemaBookingApiClient':
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise DataUnavailableError(f'Booking service unreachable: {e!r}') from e

    async def get_taken_seats(self, *, showtime_id: UUID) -> List[str]:
        """
        Raises:
            DataUnavailableError: ledger could not be read
            NotFoundError: unknown showtime
        """
        response = await self._request('GET', f'/api/showtime/{showtime_id}/seats')
        if response.status_code != 200:
            raise error_from_response(response)
        return list(orjson.loads(response.content)['taken_seats'])

    @Logger.io
    async def create_booking(
        self,
        *,
        showtime_id: UUID,
        seat_ids: List[str],
        seat_count: int,
        total_amount: int,
    ) -> Dict[str, Any]:
        response = await self._request(
            'POST',
            '/api/booking',
            json={
                'showtime_id': str(showtime_id),
                'seat_ids': seat_ids,
                'seat_count': seat_count,
                'total_amount': total_amount,
            },
        )
        if response.status_code != 201:
            raise error_from_response(response)
        return orjson.loads(response.content)

    @Logger.io
    async def finalize_payment(
        self,
        *,
        booking_id: UUID,
        amount: int,
        payment_method: str,
        movie_title: Optional[str] = None,
        seat_count: Optional[int] = None,
        show_date: Optional[str] = None,
    ) -> TransactionResult:
        """Failures of the payment itself come back as results, not exceptions."""
        response = await self._request(
            'POST',
            '/api/payment',
            json={
                'booking_id': str(booking_id),
                'amount': amount,
                'payment_method': payment_method,
                'movie_title': movie_title,
                'seat_count': seat_count,
                'show_date': show_date,
            },
        )
        if response.status_code == 200:
            body = orjson.loads(response.content)
            return TransactionResult.succeeded(
                booking_id=booking_id, transaction_id=body['transaction_id'], amount=amount
            )
        return TransactionResult.failed(booking_id=booking_id, error=error_from_response(response))
