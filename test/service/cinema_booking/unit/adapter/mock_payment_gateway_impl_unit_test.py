import random
import re

import pytest

from src.service.cinema_booking.domain.entity.booking_entity import PaymentMethod
from src.service.cinema_booking.driven_adapter.payment.mock_payment_gateway_impl import (
    MockPaymentGatewayImpl,
)


@pytest.mark.unit
class TestMockPaymentGateway:
    @pytest.mark.asyncio
    async def test_charge_success_returns_transaction_id(self) -> None:
        gateway = MockPaymentGatewayImpl(delay_seconds=0, success_rate=1.0, rng=random.Random(7))

        result = await gateway.charge(amount=525, payment_method=PaymentMethod.UPI)

        assert result.success
        assert re.fullmatch(r'TXN_\d+_[a-z0-9]{9}', result.transaction_id or '')

    @pytest.mark.asyncio
    async def test_charge_declined(self) -> None:
        gateway = MockPaymentGatewayImpl(delay_seconds=0, success_rate=0.0)

        result = await gateway.charge(amount=525, payment_method=PaymentMethod.DEBIT)

        assert not result.success
        assert result.transaction_id is None

    @pytest.mark.asyncio
    async def test_refund(self) -> None:
        gateway = MockPaymentGatewayImpl(delay_seconds=0)

        assert await gateway.refund(transaction_id='TXN_1_abc', amount=525)
        assert list(gateway.refunded) == ['TXN_1_abc']

    @pytest.mark.asyncio
    async def test_refund_history_is_bounded(self) -> None:
        gateway = MockPaymentGatewayImpl(delay_seconds=0, history_size=2)

        for n in range(3):
            await gateway.refund(transaction_id=f'TXN_{n}', amount=525)

        assert list(gateway.refunded) == ['TXN_1', 'TXN_2']
