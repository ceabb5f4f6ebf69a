class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    reason: str = 'error'

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    reason = 'invalid_request'

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class UnauthenticatedError(CustomBaseError):
    reason = 'unauthenticated'

    def __init__(self, message: str = 'Authentication required') -> None:
        super().__init__(message, 401)


class ForbiddenError(CustomBaseError):
    reason = 'forbidden'

    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    reason = 'not_found'

    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class AlreadyFinalizedError(CustomBaseError):
    reason = 'already_finalized'

    def __init__(self, message: str = 'Booking already paid') -> None:
        super().__init__(message, 409)


class SeatConflictError(CustomBaseError):
    reason = 'seat_conflict'

    def __init__(self, seat_ids: list[str], message: str | None = None) -> None:
        self.seat_ids = seat_ids
        super().__init__(
            message
            or f'Seats {", ".join(seat_ids)} have already been booked. '
            'Please select different seats.',
            409,
        )


class AmountMismatchError(CustomBaseError):
    reason = 'amount_mismatch'

    def __init__(self, message: str = 'Amount mismatch') -> None:
        super().__init__(message, 400)


class PaymentDeclinedError(CustomBaseError):
    reason = 'payment_declined'

    def __init__(self, message: str = 'Payment failed. Please try again.') -> None:
        super().__init__(message, 402)


class PersistenceError(CustomBaseError):
    reason = 'persistence_error'

    def __init__(self, message: str = 'Failed to persist booking') -> None:
        super().__init__(message, 500)


class DataUnavailableError(CustomBaseError):
    reason = 'data_unavailable'

    def __init__(self, message: str = 'Booking data is temporarily unavailable') -> None:
        super().__init__(message, 503)
