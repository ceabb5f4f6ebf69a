from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.cinema_booking.app.command.finalize_payment_use_case import (
    FinalizePaymentUseCase,
)
from src.service.cinema_booking.driving_adapter.http_controller.auth.current_user import (
    get_current_user_id,
)
from src.service.cinema_booking.driving_adapter.http_controller.schema.payment_schema import (
    PaymentFailureResponse,
    PaymentRequest,
    PaymentSuccessResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post(
    '',
    response_model=PaymentSuccessResponse,
    responses={
        400: {'model': PaymentFailureResponse},
        402: {'model': PaymentFailureResponse},
        409: {'model': PaymentFailureResponse},
    },
)
@Logger.io
async def process_payment(
    request: PaymentRequest,
    user_id: str = Depends(get_current_user_id),
    use_case: FinalizePaymentUseCase = Depends(FinalizePaymentUseCase.depends),
) -> JSONResponse:
    with tracer.start_as_current_span('controller.process_payment') as span:
        span.set_attribute('booking.id', str(request.booking_id))
        span.set_attribute('payment.method', request.payment_method)

        result = await use_case.finalize(
            booking_id=request.booking_id,
            claimed_amount=request.amount,
            payment_method=request.payment_method,
            user_id=user_id,
            movie_title=request.movie_title,
            show_date=request.show_date,
        )

        if result.success:
            body = PaymentSuccessResponse(
                transaction_id=result.transaction_id or '', message=result.message
            )
        else:
            body = PaymentFailureResponse(
                reason=result.reason or 'unknown',
                error=result.message,
                conflicting_seats=result.conflicting_seats or None,
            )
        return JSONResponse(
            status_code=result.status_code, content=body.model_dump(exclude_none=True)
        )
