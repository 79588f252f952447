"""Money formatting helpers for view models.

Formatting is display-only: the stored balance is never rounded or
replaced by what is shown.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Optional, Union

Amount = Union[Decimal, int, float, str]

_CENTS = Decimal("0.01")


def format_amount(amount: Optional[Amount]) -> str:
    """Format an amount with exactly two fractional digits ("0.00" when absent).

    Rounds half up: 2.005 -> "2.01". Floats go through their shortest
    repr, so 12.5 formats as "12.50".
    """
    if amount is None:
        return "0.00"
    if isinstance(amount, bool):
        raise ValueError(f"Not an amount: {amount!r}")
    try:
        value = Decimal(repr(amount)) if isinstance(amount, float) else Decimal(amount)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValueError(f"Not an amount: {amount!r}") from e
    if not value.is_finite():
        raise ValueError(f"Not an amount: {amount!r}")
    with localcontext() as ctx:
        # Enough digits for every integer place plus the cents.
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return str(value.quantize(_CENTS, rounding=ROUND_HALF_UP))


def balance_label(amount: Optional[Amount], currency_symbol: str = "R$") -> str:
    """Amount with its currency symbol, e.g. "R$ 12.50"."""
    return f"{currency_symbol} {format_amount(amount)}"


__all__ = ["Amount", "balance_label", "format_amount"]
