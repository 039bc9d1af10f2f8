from decimal import ROUND_HALF_UP, Decimal
from typing import Union
from metapay.common.utils import CENT, to_decimal

Number = Union[int, float, str, Decimal]


def surcharge(amount: Number, rate_percent: Number) -> Decimal:
    """Customer side fee added on top of `amount`."""
    return to_decimal(amount) * to_decimal(rate_percent) / Decimal(100)


def deduction(amount: Number, rate_percent: Number) -> Decimal:
    """Seller side fee taken out of `amount`, same percentage formula as the surcharge."""
    return to_decimal(amount) * to_decimal(rate_percent) / Decimal(100)


def quantize_usd(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)
