"""Application layer DTOs"""

from src.service.cinema_booking.app.dto.gateway_result import GatewayResult
from src.service.cinema_booking.app.dto.transaction_result import TransactionResult

__all__ = ['GatewayResult', 'TransactionResult']
