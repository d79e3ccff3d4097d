"""Utility helpers for calculator modules."""

from __future__ import annotations

from collections.abc import Iterable
from contextlib import AbstractContextManager
from decimal import ROUND_HALF_UP, Context, Decimal, localcontext

from salestax.backend.config.schema import coerce_decimal

CENT = Decimal("0.01")
BASE_PRECISION = 60


def calculation_context(values: Iterable[Decimal] = ()) -> AbstractContextManager[Context]:
    """Return a decimal context wide enough for ``values`` plus cent rounding.

    Precision grows with the magnitude of the inputs so that huge amounts can
    still be quantised to cents without raising ``InvalidOperation``.
    """

    magnitude = max((abs(value.adjusted()) for value in values if value), default=0)
    context = Context(prec=BASE_PRECISION + magnitude, rounding=ROUND_HALF_UP)
    return localcontext(context)


def exact_product(left: Decimal, right: Decimal) -> Decimal:
    """Multiply two decimals without losing digits to context precision."""

    digits = len(left.as_tuple().digits) + len(right.as_tuple().digits)
    return Context(prec=max(BASE_PRECISION, digits)).multiply(left, right)


def normalise_zero(value: Decimal) -> Decimal:
    """Drop the sign of a negative zero."""

    return value.copy_abs() if value.is_zero() else value


def round_currency(value: Decimal) -> Decimal:
    """Round monetary amounts to two decimals, half away from zero."""

    context = Context(
        prec=max(BASE_PRECISION, value.adjusted() + 3), rounding=ROUND_HALF_UP
    )
    return normalise_zero(value.quantize(CENT, context=context))


def to_amount(value: object, *, field: str = "amount") -> Decimal:
    """Accept caller input (Decimal, int, str or float) as an exact amount."""

    return coerce_decimal(value, field=field)


def format_percentage(value: Decimal) -> str:
    """Return a human-readable percentage label for ``value``."""

    percentage = value * 100
    if percentage == percentage.to_integral_value():
        return f"{int(percentage)}%"
    return f"{percentage.quantize(CENT, rounding=ROUND_HALF_UP):f}%"
