from collections import deque
import random
import string
import time

import anyio

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.service.cinema_booking.app.dto import GatewayResult
from src.service.cinema_booking.app.interface.i_payment_gateway import IPaymentGateway
from src.service.cinema_booking.domain.entity.booking_entity import PaymentMethod


class MockPaymentGatewayImpl(IPaymentGateway):
    """Simulated gateway: fixed processing delay, random declines."""

    def __init__(
        self,
        *,
        delay_seconds: float = settings.MOCK_GATEWAY_DELAY_SECONDS,
        success_rate: float = settings.MOCK_GATEWAY_SUCCESS_RATE,
        rng: random.Random | None = None,
        history_size: int = 100,
    ) -> None:
        self.delay_seconds = delay_seconds
        self.success_rate = success_rate
        self._rng = rng or random.Random()
        self.refunded: deque[str] = deque(maxlen=history_size)

    @staticmethod
    def _transaction_id(rng: random.Random) -> str:
        suffix = ''.join(rng.choices(string.ascii_lowercase + string.digits, k=9))
        return f'TXN_{int(time.time() * 1000)}_{suffix}'

    @Logger.io
    async def charge(self, *, amount: int, payment_method: PaymentMethod) -> GatewayResult:
        await anyio.sleep(self.delay_seconds)
        if self._rng.random() >= self.success_rate:
            Logger.base.info(f'💳 [MOCK-GATEWAY] Declined {amount} via {payment_method}')
            return GatewayResult(success=False, message='Card declined')

        transaction_id = self._transaction_id(self._rng)
        Logger.base.info(
            f'💳 [MOCK-GATEWAY] Charged {amount} via {payment_method}: {transaction_id}'
        )
        return GatewayResult(success=True, transaction_id=transaction_id)

    @Logger.io
    async def refund(self, *, transaction_id: str, amount: int) -> bool:
        self.refunded.append(transaction_id)
        Logger.base.info(f'↩️ [MOCK-GATEWAY] Refunded {amount} for {transaction_id}')
        return True
