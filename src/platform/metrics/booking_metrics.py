from prometheus_client import Counter, Histogram


class BookingMetrics:
    """Prometheus collectors for the booking and payment paths."""

    def __init__(self) -> None:
        self.bookings_created = Counter(
            'cinema_bookings_created_total',
            'Pending bookings created',
        )

        self.seat_claim_overlaps = Counter(
            'cinema_seat_claim_overlaps_total',
            'Seats requested at creation that another booking already owned',
        )

        self.finalize_outcomes = Counter(
            'cinema_finalize_outcomes_total',
            'Payment finalization results',
            ['result'],  # success or an error reason code
        )

        self.finalize_duration = Histogram(
            'cinema_finalize_duration_seconds',
            'End-to-end payment finalization time',
            buckets=[0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
        )

        self.gateway_duration = Histogram(
            'cinema_payment_gateway_duration_seconds',
            'Payment gateway charge latency',
            ['result'],
            buckets=[0.1, 0.5, 1.0, 1.5, 2.0, 5.0, 10.0],
        )

        self.lock_wait_duration = Histogram(
            'cinema_showtime_lock_wait_seconds',
            'Time spent waiting for the per-showtime finalize lock',
            buckets=[0.001, 0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 15.0],
        )

        self.refunds = Counter(
            'cinema_payment_refunds_total',
            'Charges refunded because the booking could not be finalized',
            ['result'],
        )

        self.bookings_expired = Counter(
            'cinema_bookings_expired_total',
            'Pending bookings cancelled by the reaper',
        )

    def record_finalize(self, *, result: str, duration: float) -> None:
        self.finalize_outcomes.labels(result=result).inc()
        self.finalize_duration.observe(duration)

    def record_gateway_call(self, *, result: str, duration: float) -> None:
        self.gateway_duration.labels(result=result).observe(duration)

    def record_refund(self, *, result: str) -> None:
        self.refunds.labels(result=result).inc()


# Global metrics instance
metrics = BookingMetrics()
