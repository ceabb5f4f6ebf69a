"""
Client-side unit tests: the booking API is an httpx.MockTransport handler.
"""

from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

import httpx
import orjson
import pytest

from src.client.cinema_booking_api_client import CinemaBookingApiClient


SHOWTIME_ID = UUID('01936d8f-5e73-7c4e-a9c5-000000000001')
BOOKING_ID = UUID('01936d8f-6a10-7b2e-8c4d-000000000001')


class FakeBookingServer:
    def __init__(self) -> None:
        self.taken: List[str] = []
        self.ledger_down = False
        self.unreachable = False
        self.requests: List[httpx.Request] = []
        self.payment_response: Tuple[int, Dict[str, Any]] = (
            200,
            {'success': True, 'transaction_id': 'TXN_1_abcdefghi', 'message': 'Payment successful'},
        )

    def requests_to(self, path: str) -> List[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]

    def json_body(self, request: httpx.Request) -> Dict[str, Any]:
        return orjson.loads(request.content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.unreachable:
            raise httpx.ConnectError('connection refused', request=request)

        path = request.url.path
        if path == f'/api/showtime/{SHOWTIME_ID}/seats':
            if self.ledger_down:
                return httpx.Response(
                    503,
                    json={
                        'detail': 'Booking data is temporarily unavailable',
                        'reason': 'data_unavailable',
                    },
                )
            return httpx.Response(
                200,
                json={
                    'showtime_id': str(SHOWTIME_ID),
                    'rows': list('ABCDEFGH'),
                    'seats_per_row': 12,
                    'taken_seats': sorted(self.taken),
                },
            )
        if path == '/api/booking' and request.method == 'POST':
            body = self.json_body(request)
            return httpx.Response(
                201, json={'id': str(BOOKING_ID), 'user_id': 'user-a', 'status': 'pending', **body}
            )
        if path == '/api/payment' and request.method == 'POST':
            status_code, body = self.payment_response
            return httpx.Response(status_code, json=body)
        return httpx.Response(404, json={'detail': 'Showtime not found', 'reason': 'not_found'})


@pytest.fixture
def server() -> FakeBookingServer:
    return FakeBookingServer()


@pytest.fixture
async def api(server: FakeBookingServer):
    client = CinemaBookingApiClient(
        base_url='http://test', token='token-a', transport=httpx.MockTransport(server)
    )
    yield client
    await client.aclose()


@pytest.fixture
def showtime_id() -> UUID:
    return SHOWTIME_ID


@pytest.fixture
def booking_id() -> UUID:
    return BOOKING_ID


def conflict_response(
    seats: List[str], message: Optional[str] = None
) -> Tuple[int, Dict[str, Any]]:
    return (
        409,
        {
            'success': False,
            'reason': 'seat_conflict',
            'error': message
            or f'Seats {", ".join(seats)} have already been booked. Please select different seats.',
            'conflicting_seats': seats,
        },
    )


@pytest.fixture
def make_conflict_response():
    return conflict_response
