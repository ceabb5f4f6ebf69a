from typing import Optional

import attrs


@attrs.define(frozen=True)
class GatewayResult:
    """Outcome of one charge attempt at the payment gateway."""

    success: bool
    transaction_id: Optional[str] = None
    message: Optional[str] = None
