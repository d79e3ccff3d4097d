"""Sales tax arithmetic for single amounts and multi-line carts.

Every figure is carried as an exact :class:`~decimal.Decimal` until the very
end of a calculation, where monetary fields are rounded to cents once (when
the configuration asks for it). Cart lines are split with their own VAT rate
and summed unrounded; turnover tax only ever applies to the aggregate
subtotal.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from salestax.backend.app.models import CartTotals, LineBreakdown, LineItem, TaxResult
from salestax.backend.config.schema import TaxConfiguration, vat_rate_for

from .utils import (
    calculation_context,
    exact_product,
    normalise_zero,
    round_currency,
    to_amount,
)

_LOGGER = logging.getLogger(__name__)

_ZERO = Decimal(0)


def _split_amount(
    amount: Decimal,
    vat_rate: Decimal,
    turnover_rate: Decimal,
    tax_included: bool,
) -> tuple[Decimal, Decimal]:
    """Return the exact ``(subtotal, vat_amount)`` pair for ``amount``."""

    if tax_included:
        subtotal = amount / (1 + vat_rate + turnover_rate)
    else:
        subtotal = amount
    return subtotal, subtotal * vat_rate


def _finalise(
    subtotal: Decimal, vat_amount: Decimal, config: TaxConfiguration
) -> TaxResult:
    """Derive totals from exact sums and apply the single rounding step."""

    if config.include_turnover_tax:
        turnover_tax_amount = subtotal * config.turnover_tax_rate
    else:
        turnover_tax_amount = _ZERO

    total_taxes = vat_amount + turnover_tax_amount
    total_amount = subtotal + total_taxes
    effective_tax_rate = _ZERO if subtotal.is_zero() else total_taxes / subtotal

    monetary = {
        "subtotal": subtotal,
        "vat_amount": vat_amount,
        "turnover_tax_amount": turnover_tax_amount,
        "total_taxes": total_taxes,
        "total_amount": total_amount,
    }
    if config.round_to_cents:
        monetary = {key: round_currency(value) for key, value in monetary.items()}
    else:
        monetary = {key: normalise_zero(value) for key, value in monetary.items()}

    return TaxResult(**monetary, effective_tax_rate=normalise_zero(effective_tax_rate))


def _coerce_item(item: LineItem | Mapping[str, Any]) -> LineItem:
    if isinstance(item, LineItem):
        return item
    return LineItem.model_validate(item)


def _line_rate(item: LineItem, config: TaxConfiguration) -> Decimal:
    if item.vat_category is not None:
        return vat_rate_for(item.vat_category)
    return config.vat_rate


def _split_line(item: LineItem, config: TaxConfiguration) -> LineBreakdown:
    vat_rate = _line_rate(item, config)
    line_total = exact_product(item.quantity, item.unit_price)
    subtotal, vat_amount = _split_amount(
        line_total,
        vat_rate,
        config.active_turnover_rate,
        config.tax_included_in_price,
    )
    return LineBreakdown(
        product_id=item.product_id,
        quantity=item.quantity,
        unit_price=item.unit_price,
        vat_rate=vat_rate,
        line_total=line_total,
        subtotal=subtotal,
        vat_amount=vat_amount,
    )


def calculate_for_amount(amount: Any, config: TaxConfiguration) -> TaxResult:
    """Split ``amount`` into subtotal, VAT and turnover tax.

    With ``tax_included_in_price`` the amount is read as a final price and the
    taxes are backed out of it; otherwise it is the pre-tax subtotal and taxes
    are added on top. Negative amounts (refunds) keep their sign throughout.
    """

    value = to_amount(amount)
    with calculation_context((value,)):
        subtotal, vat_amount = _split_amount(
            value,
            config.vat_rate,
            config.active_turnover_rate,
            config.tax_included_in_price,
        )
        result = _finalise(subtotal, vat_amount, config)

    _LOGGER.debug(
        "Calculated taxes for amount %s (tax included: %s): %s",
        value,
        config.tax_included_in_price,
        result,
    )
    return result


def reverse_calculation(amount: Any, config: TaxConfiguration) -> TaxResult:
    """Recover subtotal and taxes from an amount the caller already holds.

    This is the same computation as :func:`calculate_for_amount`; whether
    ``amount`` is treated as a final price depends solely on
    ``config.tax_included_in_price``.
    """

    return calculate_for_amount(amount, config)


def calculate_line(
    item: LineItem | Mapping[str, Any], config: TaxConfiguration
) -> LineBreakdown:
    """Return the unrounded split of a single cart line."""

    line = _coerce_item(item)
    with calculation_context((line.quantity, line.unit_price)):
        return _split_line(line, config)


def calculate_cart_breakdown(
    items: Iterable[LineItem | Mapping[str, Any]], config: TaxConfiguration
) -> tuple[TaxResult, list[LineBreakdown]]:
    """Calculate a cart and also return the per-line splits it was built from."""

    lines = [_coerce_item(item) for item in items]
    magnitudes = [exact_product(line.quantity, line.unit_price) for line in lines]

    with calculation_context(magnitudes):
        totals = CartTotals()
        breakdown: list[LineBreakdown] = []
        for line in lines:
            split = _split_line(line, config)
            totals.add(split)
            breakdown.append(split)
        result = _finalise(totals.subtotal, totals.vat_amount, config)

    _LOGGER.debug("Calculated taxes for cart of %d line(s): %s", len(lines), result)
    return result, breakdown


def calculate_for_items(
    items: Iterable[LineItem | Mapping[str, Any]], config: TaxConfiguration
) -> TaxResult:
    """Calculate taxes for a cart, honouring per-line VAT categories."""

    result, _ = calculate_cart_breakdown(items, config)
    return result
