"""Domain-specific calculation helpers."""

from .tax import (
    calculate_cart_breakdown,
    calculate_for_amount,
    calculate_for_items,
    calculate_line,
    reverse_calculation,
)
from .utils import format_percentage, round_currency, to_amount

__all__ = [
    "calculate_cart_breakdown",
    "calculate_for_amount",
    "calculate_for_items",
    "calculate_line",
    "format_percentage",
    "reverse_calculation",
    "round_currency",
    "to_amount",
]
