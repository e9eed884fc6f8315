"""What a buyer is told about money when an order is cancelled."""
from decimal import Decimal
from typing import Optional, Union

from shared.config.settings import CURRENCY_SYMBOL

ESCROW_REFUND = "A full refund will be issued from escrow."
NO_REFUND = "No payment was captured. No refund is required."

# Captured outside escrow; legacy rows still carry these
FULLY_PAID_STATUSES = frozenset({"full_paid", "released"})

Amount = Union[Decimal, float, int, None]


def format_amount(amount: Amount) -> str:
    return f"{CURRENCY_SYMBOL}{Decimal(str(amount or 0)):,.2f}"


def build_refund_summary(payment_status: Optional[str], total_amount: Amount,
                         deposit_amount: Amount = None) -> str:
    """One sentence describing the refund owed for a cancelled order.

    A deposit is only refunded when it was actually paid and was smaller than
    the order total; a deposit covering the whole order counts as full payment.
    """
    payment_status = (payment_status or "").strip().lower()
    total = Decimal(str(total_amount or 0))
    deposit = Decimal(str(deposit_amount or 0))

    if payment_status == "escrow_hold":
        return ESCROW_REFUND
    if payment_status == "deposit_paid" and 0 < deposit < total:
        return f"Deposit refund of {format_amount(deposit)} will be issued."
    if payment_status in FULLY_PAID_STATUSES or (payment_status == "deposit_paid" and deposit > 0):
        return f"Full refund of {format_amount(total)} will be issued."
    return NO_REFUND
