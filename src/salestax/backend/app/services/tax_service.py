"""Stateful facade over the tax calculators plus stateless shortcuts.

:class:`TaxService` keeps a default :class:`TaxConfiguration` so callers can
set it once (usually from the settings screen) and reuse it everywhere. The
stored configuration is immutable and replaced wholesale on update, so a
concurrent reader always sees either the previous or the new value in full.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from decimal import Decimal
from threading import Lock
from typing import Any

from salestax.backend.app.models import LineItem, TaxResult
from salestax.backend.config.schema import (
    ConfigurationError,
    TaxConfiguration,
    merge_configuration,
)

from .calculators import (
    calculate_for_amount,
    calculate_for_items,
    reverse_calculation,
)
from .formatter import DEFAULT_CURRENCY_SYMBOL, format_display

_LOGGER = logging.getLogger(__name__)

ConfigurationOverrides = TaxConfiguration | Mapping[str, Any] | None
LineItems = Iterable[LineItem | Mapping[str, Any]]


class TaxService:
    """Hold a default configuration and expose calculations against it."""

    def __init__(
        self,
        configuration: TaxConfiguration | None = None,
        *,
        currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
    ) -> None:
        if configuration is None:
            configuration = TaxConfiguration()
        self._configuration = configuration
        self._currency_symbol = currency_symbol
        self._lock = Lock()

    @property
    def currency_symbol(self) -> str:
        return self._currency_symbol

    def get_configuration(self) -> TaxConfiguration:
        """Return a copy of the current default configuration."""

        return self._configuration.model_copy()

    def update_configuration(
        self, partial: Mapping[str, Any] | None = None, **changes: Any
    ) -> TaxConfiguration:
        """Merge ``partial`` and ``changes`` into the default configuration.

        Raises :class:`ConfigurationError` when the merged result is invalid, in
        which case the stored configuration is left untouched.
        """

        if partial is not None and not isinstance(partial, Mapping):
            raise ConfigurationError("Configuration updates must be provided as a mapping")

        combined = {**(partial or {}), **changes}
        with self._lock:
            updated = merge_configuration(self._configuration, combined)
            self._configuration = updated

        _LOGGER.info("Tax configuration updated: %s", updated.as_payload())
        return updated.model_copy()

    def replace_configuration(self, configuration: TaxConfiguration) -> None:
        """Swap in an already validated configuration."""

        with self._lock:
            self._configuration = configuration

    def resolve_configuration(
        self, overrides: ConfigurationOverrides = None
    ) -> TaxConfiguration:
        """Return the configuration a call with ``overrides`` would use."""

        snapshot = self._configuration
        if overrides is None:
            return snapshot
        if isinstance(overrides, TaxConfiguration):
            return overrides
        return merge_configuration(snapshot, overrides)

    def calculate_for_amount(
        self, amount: Any, overrides: ConfigurationOverrides = None
    ) -> TaxResult:
        return calculate_for_amount(amount, self.resolve_configuration(overrides))

    def calculate_for_items(
        self, items: LineItems, overrides: ConfigurationOverrides = None
    ) -> TaxResult:
        return calculate_for_items(items, self.resolve_configuration(overrides))

    def reverse_calculation(
        self, amount: Any, overrides: ConfigurationOverrides = None
    ) -> TaxResult:
        return reverse_calculation(amount, self.resolve_configuration(overrides))

    def format_display(
        self, result: TaxResult, currency_symbol: str | None = None
    ) -> dict[str, str]:
        return format_display(result, currency_symbol or self._currency_symbol)


tax_service = TaxService()

DEFAULT_CONFIGURATION = TaxConfiguration()
INCLUSIVE_CONFIGURATION = TaxConfiguration(tax_included_in_price=True)


def _configuration_from(config: ConfigurationOverrides) -> TaxConfiguration:
    if config is None:
        return DEFAULT_CONFIGURATION
    if isinstance(config, TaxConfiguration):
        return config
    return merge_configuration(DEFAULT_CONFIGURATION, config)


def calculate_taxes(amount: Any, config: ConfigurationOverrides = None) -> TaxResult:
    """Calculate taxes for ``amount`` without touching the shared facade.

    ``config`` may be a full configuration or a mapping of overrides applied
    to the defaults (standard VAT, tax-exclusive prices, no turnover tax).
    """

    return calculate_for_amount(amount, _configuration_from(config))


def calculate_cart_taxes(
    items: LineItems, config: ConfigurationOverrides = None
) -> TaxResult:
    """Stateless counterpart of :meth:`TaxService.calculate_for_items`."""

    return calculate_for_items(items, _configuration_from(config))


def get_tax_amount(total: Any) -> Decimal:
    """Return the tax contained in a final price at the standard VAT rate."""

    return calculate_for_amount(total, INCLUSIVE_CONFIGURATION).total_taxes


def get_subtotal(total: Any) -> Decimal:
    """Return the pre-tax part of a final price at the standard VAT rate."""

    return calculate_for_amount(total, INCLUSIVE_CONFIGURATION).subtotal


__all__ = [
    "DEFAULT_CONFIGURATION",
    "TaxService",
    "calculate_cart_taxes",
    "calculate_taxes",
    "get_subtotal",
    "get_tax_amount",
    "tax_service",
]
