"""Pydantic models describing the public API surface."""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from salestax.backend.config.rates import VatCategory
from salestax.backend.config.schema import coerce_decimal, describe_validation_error

__all__ = [
    "LineItem",
    "AmountCalculationRequest",
    "CartCalculationRequest",
    "ResultPayload",
    "DisplayPayload",
    "ResultLabels",
    "LineDetail",
    "ResponseMeta",
    "CalculationResponse",
    "format_validation_error",
]


def _normalise_overrides(value: Any) -> dict[str, Any] | None:
    if value is None:
        return None
    if isinstance(value, Mapping):
        return {str(key): raw for key, raw in value.items()}
    raise ValueError("Configuration overrides must be an object mapping fields to values")


class LineItem(BaseModel):
    """A single cart line: product, quantity and unit price."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    product_id: str = Field(alias="productId")
    quantity: Decimal
    unit_price: Decimal = Field(alias="unitPrice")
    vat_category: VatCategory | None = Field(default=None, alias="vatCategory")

    @field_validator("product_id", mode="before")
    @classmethod
    def _coerce_product_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("quantity", "unit_price", mode="before")
    @classmethod
    def _coerce_numbers(cls, value: Any, info: ValidationInfo) -> Decimal:
        return coerce_decimal(value, field=info.field_name or "value")


class AmountCalculationRequest(BaseModel):
    """Single amount to split into subtotal and taxes."""

    model_config = ConfigDict(extra="forbid")

    amount: Decimal
    configuration: dict[str, Any] | None = None
    locale: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Decimal:
        return coerce_decimal(value, field="amount")

    @field_validator("configuration", mode="before")
    @classmethod
    def _coerce_configuration(cls, value: Any) -> dict[str, Any] | None:
        return _normalise_overrides(value)


class CartCalculationRequest(BaseModel):
    """Cart lines to calculate taxes for."""

    model_config = ConfigDict(extra="forbid")

    items: list[LineItem]
    configuration: dict[str, Any] | None = None
    locale: str | None = None

    @field_validator("configuration", mode="before")
    @classmethod
    def _coerce_configuration(cls, value: Any) -> dict[str, Any] | None:
        return _normalise_overrides(value)


class ResultPayload(BaseModel):
    """Exact result values rendered as decimal strings."""

    model_config = ConfigDict(extra="forbid")

    subtotal: str
    vat_amount: str
    turnover_tax_amount: str
    total_taxes: str
    total_amount: str
    effective_tax_rate: str


class DisplayPayload(BaseModel):
    """Currency-formatted strings ready for receipts and cart widgets."""

    model_config = ConfigDict(extra="forbid")

    subtotal: str
    vat_amount: str
    turnover_tax_amount: str
    total_taxes: str
    total_amount: str
    effective_tax_rate: str


class ResultLabels(BaseModel):
    """Localized labels for result fields."""

    model_config = ConfigDict(extra="forbid")

    subtotal: str
    vat_amount: str
    turnover_tax_amount: str
    total_taxes: str
    total_amount: str
    effective_tax_rate: str


class LineDetail(BaseModel):
    """Per-line breakdown of a cart calculation, rounded for display."""

    model_config = ConfigDict(extra="forbid")

    product_id: str
    quantity: str
    unit_price: str
    vat_rate: str
    line_total: str
    subtotal: str
    vat_amount: str


class ResponseMeta(BaseModel):
    """Metadata returned alongside the calculation output."""

    model_config = ConfigDict(extra="forbid")

    operation: str
    locale: str
    currency_symbol: str
    configuration: dict[str, Any]


class CalculationResponse(BaseModel):
    """Full response payload produced by the calculation service."""

    model_config = ConfigDict(extra="forbid")

    result: ResultPayload
    display: DisplayPayload
    labels: ResultLabels
    meta: ResponseMeta
    lines: list[LineDetail] | None = None


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    return f"Invalid calculation payload: {describe_validation_error(error)}"
