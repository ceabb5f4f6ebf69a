from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from src.platform.exception.exceptions import AmountMismatchError


def expected_charge(total_amount: int, *, surcharge_rate: Decimal) -> int:
    """
    Booking total plus service surcharge, surcharge rounded half-up to whole units.

    Example: 500 at 5% -> 525; 250 at 5% -> 263 (12.5 rounds up).
    """
    surcharge = (Decimal(total_amount) * surcharge_rate).quantize(
        Decimal('1'), rounding=ROUND_HALF_UP
    )
    return total_amount + int(surcharge)


def validate_claimed_amount(
    *,
    claimed_amount: int | float | Decimal,
    total_amount: int,
    surcharge_rate: Decimal,
    tolerance: int,
) -> int:
    """
    Returns:
        The expected charge, when the claim is within tolerance of it

    Raises:
        AmountMismatchError: claim differs from the expected charge by more than tolerance
    """
    expected = expected_charge(total_amount, surcharge_rate=surcharge_rate)
    try:
        claimed = Decimal(str(claimed_amount))
    except InvalidOperation as e:
        raise AmountMismatchError(f'Amount mismatch: {claimed_amount!r} is not a number') from e
    if not claimed.is_finite() or abs(claimed - expected) > tolerance:
        raise AmountMismatchError(f'Amount mismatch: expected {expected}, got {claimed_amount}')
    return expected


def to_whole_units(amount: int | float | Decimal) -> int:
    return int(Decimal(str(amount)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))
