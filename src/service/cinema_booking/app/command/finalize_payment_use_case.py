from decimal import Decimal
import time
from typing import Optional, Self
from uuid import UUID

import anyio
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    CustomBaseError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    PaymentDeclinedError,
    SeatConflictError,
    UnauthenticatedError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.booking_metrics import metrics
from src.service.cinema_booking.app.dto import TransactionResult
from src.service.cinema_booking.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.cinema_booking.app.interface.i_notification_sender import INotificationSender
from src.service.cinema_booking.app.interface.i_payment_gateway import IPaymentGateway
from src.service.cinema_booking.app.interface.i_showtime_lock import IShowtimeLock
from src.service.cinema_booking.domain.entity.booking_entity import Booking, PaymentMethod
from src.service.cinema_booking.domain.value_object.charge_amount import (
    to_whole_units,
    validate_claimed_amount,
)
from src.service.cinema_booking.domain.value_object.seat_map import sort_seat_ids


class FinalizePaymentUseCase:
    """
    Re-verify seat ownership, charge, and move a pending booking to paid.

    Flow:
    1. Caller must be authenticated and own the booking
    2. Booking must still be pending
    3. Under the per-showtime lock:
       a. re-read the booking and seat ownership from the primary database
       b. reject if another booking owns any of the seats (nothing charged)
       c. check the claimed amount against total + surcharge
       d. charge the gateway (bounded by a timeout)
       e. claim seats and mark paid in one transaction; refund if that fails
    4. Send the confirmation notification after the lock is released

    Every taxonomy error is returned as a failed TransactionResult.
    """

    def __init__(
        self,
        *,
        booking_command_repo: IBookingCommandRepo,
        payment_gateway: IPaymentGateway,
        showtime_lock: IShowtimeLock,
        notification_sender: INotificationSender,
        surcharge_rate: Optional[Decimal] = None,
        amount_tolerance: Optional[int] = None,
        gateway_timeout: Optional[float] = None,
    ) -> None:
        self.booking_command_repo = booking_command_repo
        self.payment_gateway = payment_gateway
        self.showtime_lock = showtime_lock
        self.notification_sender = notification_sender
        self.surcharge_rate = (
            surcharge_rate if surcharge_rate is not None else settings.SERVICE_SURCHARGE_RATE
        )
        self.amount_tolerance = (
            amount_tolerance if amount_tolerance is not None else settings.AMOUNT_TOLERANCE
        )
        self.gateway_timeout = gateway_timeout or settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        booking_command_repo: IBookingCommandRepo = Depends(
            Provide[Container.booking_command_repo]
        ),
        payment_gateway: IPaymentGateway = Depends(Provide[Container.payment_gateway]),
        showtime_lock: IShowtimeLock = Depends(Provide[Container.showtime_lock]),
        notification_sender: INotificationSender = Depends(
            Provide[Container.notification_sender]
        ),
    ) -> Self:
        return cls(
            booking_command_repo=booking_command_repo,
            payment_gateway=payment_gateway,
            showtime_lock=showtime_lock,
            notification_sender=notification_sender,
        )

    @Logger.io
    async def finalize(
        self,
        *,
        booking_id: UUID,
        claimed_amount: int | float | Decimal,
        payment_method: str,
        user_id: Optional[str],
        movie_title: Optional[str] = None,
        show_date: Optional[str] = None,
    ) -> TransactionResult:
        started = time.perf_counter()
        with self.tracer.start_as_current_span(
            'use_case.finalize_payment', attributes={'booking.id': str(booking_id)}
        ) as span:
            try:
                paid_booking = await self._finalize(
                    booking_id=booking_id,
                    claimed_amount=claimed_amount,
                    payment_method=payment_method,
                    user_id=user_id,
                )
            except CustomBaseError as e:
                span.set_attribute('finalize.result', e.reason)
                metrics.record_finalize(result=e.reason, duration=time.perf_counter() - started)
                Logger.base.warning(
                    f'💳 [FINALIZE] {booking_id} rejected ({e.reason}): {e.message}'
                )
                return TransactionResult.failed(booking_id=booking_id, error=e)

            span.set_attribute('finalize.result', 'success')
            metrics.record_finalize(result='success', duration=time.perf_counter() - started)
            Logger.base.info(
                f'✅ [FINALIZE] {booking_id} paid, transaction {paid_booking.transaction_id}'
            )

        await self._notify(
            booking=paid_booking,
            movie_title=movie_title,
            show_date=show_date,
        )
        return TransactionResult.succeeded(
            booking_id=booking_id,
            transaction_id=paid_booking.transaction_id or '',
            amount=to_whole_units(claimed_amount),
        )

    async def _finalize(
        self,
        *,
        booking_id: UUID,
        claimed_amount: int | float | Decimal,
        payment_method: str,
        user_id: Optional[str],
    ) -> Booking:
        if not user_id:
            raise UnauthenticatedError()
        try:
            method = PaymentMethod(payment_method)
        except ValueError as e:
            raise DomainError(f'Unsupported payment method: {payment_method}') from e

        booking = await self._load_owned_booking(booking_id=booking_id, user_id=user_id)
        booking.validate_can_be_paid()

        lock_started = time.perf_counter()
        async with self.showtime_lock.hold(showtime_id=booking.showtime_id):
            metrics.lock_wait_duration.observe(time.perf_counter() - lock_started)

            # State may have moved while waiting for the lock
            booking = await self._load_owned_booking(booking_id=booking_id, user_id=user_id)
            booking.validate_can_be_paid()
            await self._ensure_seats_owned(booking=booking)

            validate_claimed_amount(
                claimed_amount=claimed_amount,
                total_amount=booking.total_amount,
                surcharge_rate=self.surcharge_rate,
                tolerance=self.amount_tolerance,
            )
            charge_amount = to_whole_units(claimed_amount)
            transaction_id = await self._charge(amount=charge_amount, payment_method=method)

            paid = booking.mark_as_paid(transaction_id=transaction_id, payment_method=method)
            try:
                return await self.booking_command_repo.finalize_paid(booking=paid)
            except CustomBaseError:
                await self._refund(transaction_id=transaction_id, amount=charge_amount)
                raise

    async def _load_owned_booking(self, *, booking_id: UUID, user_id: str) -> Booking:
        booking = await self.booking_command_repo.get_by_id(booking_id=booking_id)
        if not booking:
            raise NotFoundError('Booking not found')
        if booking.user_id != user_id:
            raise ForbiddenError('Booking does not belong to the current user')
        return booking

    async def _ensure_seats_owned(self, *, booking: Booking) -> None:
        owners = await self.booking_command_repo.get_seat_owners(
            showtime_id=booking.showtime_id, seat_ids=booking.seat_ids
        )
        conflicts = sort_seat_ids(
            seat_id for seat_id, owner_id in owners.items() if owner_id != booking.id
        )
        if conflicts:
            raise SeatConflictError(conflicts)

    async def _charge(self, *, amount: int, payment_method: PaymentMethod) -> str:
        started = time.perf_counter()
        try:
            with anyio.fail_after(self.gateway_timeout):
                result = await self.payment_gateway.charge(
                    amount=amount, payment_method=payment_method
                )
        except TimeoutError as e:
            metrics.record_gateway_call(result='timeout', duration=time.perf_counter() - started)
            raise PaymentDeclinedError(
                'Payment gateway did not respond. Please try again.'
            ) from e
        except Exception as e:
            metrics.record_gateway_call(result='error', duration=time.perf_counter() - started)
            Logger.base.error(f'💳 [FINALIZE] Gateway error: {e!r}')
            raise PaymentDeclinedError() from e

        if not result.success or not result.transaction_id:
            metrics.record_gateway_call(result='declined', duration=time.perf_counter() - started)
            raise PaymentDeclinedError()

        metrics.record_gateway_call(result='success', duration=time.perf_counter() - started)
        return result.transaction_id

    async def _refund(self, *, transaction_id: str, amount: int) -> None:
        with anyio.CancelScope(shield=True):
            try:
                refunded = await self.payment_gateway.refund(
                    transaction_id=transaction_id, amount=amount
                )
            except Exception as e:
                # The commit error stays the reported outcome
                Logger.base.error(f'🚨 [FINALIZE] Refund of {transaction_id} raised: {e!r}')
                refunded = False
        metrics.record_refund(result='success' if refunded else 'failed')
        if refunded:
            Logger.base.warning(f'↩️ [FINALIZE] Refunded {transaction_id} after failed commit')
        else:
            Logger.base.error(
                f'🚨 [FINALIZE] Refund of {transaction_id} failed, needs manual review'
            )

    async def _notify(
        self, *, booking: Booking, movie_title: Optional[str], show_date: Optional[str]
    ) -> None:
        try:
            await self.notification_sender.send_payment_confirmation(
                booking=booking,
                movie_title=movie_title or 'your movie',
                show_date=show_date or '',
            )
        except Exception as e:
            # Payment is committed; notification failures never undo it
            Logger.base.error(f'📧 [FINALIZE] Confirmation for {booking.id} not sent: {e!r}')
