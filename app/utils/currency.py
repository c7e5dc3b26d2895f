from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CURRENCY_SYMBOL = "Ksh"


def format_currency(amount: Union[Decimal, float, int, str], decimals: bool = False) -> str:
    """Format an amount as Kenyan Shillings, e.g. ``Ksh 1,450`` or ``Ksh 1,450.00``."""
    value = Decimal(str(amount))
    places = Decimal("0.01") if decimals else Decimal("1")
    rounded = value.copy_abs().quantize(places, rounding=ROUND_HALF_UP)
    body = f"{rounded:,.2f}" if decimals else f"{rounded:,.0f}"
    sign = "-" if value < 0 and rounded != 0 else ""
    return f"{sign}{CURRENCY_SYMBOL} {body}"
