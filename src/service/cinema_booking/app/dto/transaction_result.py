from typing import List, Optional
from uuid import UUID

import attrs

from src.platform.exception.exceptions import CustomBaseError, SeatConflictError


@attrs.define(frozen=True)
class TransactionResult:
    """
    Outcome of a payment finalization.

    Failures carry the error's reason code, message and HTTP status so the
    controller can render them without re-raising.
    """

    success: bool
    booking_id: UUID
    message: str
    transaction_id: Optional[str] = None
    amount: Optional[int] = None
    reason: Optional[str] = None
    status_code: int = 200
    conflicting_seats: List[str] = attrs.field(factory=list)

    @classmethod
    def succeeded(
        cls, *, booking_id: UUID, transaction_id: str, amount: int
    ) -> 'TransactionResult':
        return cls(
            success=True,
            booking_id=booking_id,
            transaction_id=transaction_id,
            amount=amount,
            message='Payment successful',
        )

    @classmethod
    def failed(cls, *, booking_id: UUID, error: CustomBaseError) -> 'TransactionResult':
        return cls(
            success=False,
            booking_id=booking_id,
            message=error.message,
            reason=error.reason,
            status_code=error.status_code,
            conflicting_seats=error.seat_ids if isinstance(error, SeatConflictError) else [],
        )
