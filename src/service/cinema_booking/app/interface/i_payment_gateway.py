from abc import ABC, abstractmethod

from src.service.cinema_booking.app.dto import GatewayResult
from src.service.cinema_booking.domain.entity.booking_entity import PaymentMethod


class IPaymentGateway(ABC):
    @abstractmethod
    async def charge(self, *, amount: int, payment_method: PaymentMethod) -> GatewayResult:
        """A declined charge is a result with success=False, not an exception."""

    @abstractmethod
    async def refund(self, *, transaction_id: str, amount: int) -> bool:
        pass
