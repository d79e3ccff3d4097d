"""Typed inputs and results shared across the tax calculation services.

Caller-supplied inputs (line items, request payloads) are Pydantic models so
validation lives in one place; computed values are small frozen dataclasses
holding :class:`~decimal.Decimal` amounts. Results are created fresh for every
call and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import Decimal

from .api import (
    AmountCalculationRequest,
    CalculationResponse,
    CartCalculationRequest,
    DisplayPayload,
    LineDetail,
    LineItem,
    ResponseMeta,
    ResultLabels,
    ResultPayload,
    format_validation_error,
)

__all__ = [
    "AmountCalculationRequest",
    "CalculationResponse",
    "CartCalculationRequest",
    "CartTotals",
    "DisplayPayload",
    "LineBreakdown",
    "LineDetail",
    "LineItem",
    "ResponseMeta",
    "ResultLabels",
    "ResultPayload",
    "TaxResult",
    "format_validation_error",
]


@dataclass(frozen=True, slots=True)
class TaxResult:
    """Tax breakdown for an amount or a cart."""

    subtotal: Decimal
    vat_amount: Decimal
    turnover_tax_amount: Decimal
    total_taxes: Decimal
    total_amount: Decimal
    effective_tax_rate: Decimal

    def as_dict(self) -> dict[str, str]:
        """Serialise every field as a decimal string."""

        return {key: str(value) for key, value in asdict(self).items()}


@dataclass(frozen=True, slots=True)
class LineBreakdown:
    """Unrounded split of one cart line into subtotal and VAT."""

    product_id: str
    quantity: Decimal
    unit_price: Decimal
    vat_rate: Decimal
    line_total: Decimal
    subtotal: Decimal
    vat_amount: Decimal


@dataclass(slots=True)
class CartTotals:
    """Exact running sums while a cart is being calculated."""

    subtotal: Decimal = Decimal(0)
    vat_amount: Decimal = Decimal(0)

    def add(self, line: LineBreakdown) -> None:
        self.subtotal += line.subtotal
        self.vat_amount += line.vat_amount
