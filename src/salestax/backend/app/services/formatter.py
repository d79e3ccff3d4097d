"""Render tax results as currency strings for receipts and cart widgets."""

from __future__ import annotations

from decimal import Decimal

from salestax.backend.app.models import LineBreakdown, TaxResult

from .calculators import format_percentage, round_currency

DEFAULT_CURRENCY_SYMBOL = "$"

MONETARY_FIELDS = (
    "subtotal",
    "vat_amount",
    "turnover_tax_amount",
    "total_taxes",
    "total_amount",
)


def format_currency(value: Decimal, currency_symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
    """Return ``value`` with exactly two decimals behind ``currency_symbol``."""

    return f"{currency_symbol}{round_currency(value):f}"


def format_display(
    result: TaxResult, currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
) -> dict[str, str]:
    """Format every monetary field of ``result``.

    ``turnover_tax_amount`` is always present and renders as the zero string
    when the tax was not applied.
    """

    return {
        field: format_currency(getattr(result, field), currency_symbol)
        for field in MONETARY_FIELDS
    }


def format_line(line: LineBreakdown) -> dict[str, str]:
    """Round a line breakdown for display, keeping inputs exact."""

    return {
        "product_id": line.product_id,
        "quantity": str(line.quantity),
        "unit_price": str(line.unit_price),
        "vat_rate": format_percentage(line.vat_rate),
        "line_total": str(round_currency(line.line_total)),
        "subtotal": str(round_currency(line.subtotal)),
        "vat_amount": str(round_currency(line.vat_amount)),
    }


__all__ = [
    "DEFAULT_CURRENCY_SYMBOL",
    "MONETARY_FIELDS",
    "format_currency",
    "format_display",
    "format_line",
]
