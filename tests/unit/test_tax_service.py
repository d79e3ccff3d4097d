"""Unit tests for the stateful tax service facade and its shortcuts."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest

from salestax.backend.app.services.tax_service import (
    TaxService,
    calculate_cart_taxes,
    calculate_taxes,
    get_subtotal,
    get_tax_amount,
)
from salestax.backend.config.schema import ConfigurationError, TaxConfiguration


def test_service_starts_with_library_defaults(service: TaxService) -> None:
    assert service.get_configuration() == TaxConfiguration()
    assert service.currency_symbol == "$"


def test_update_configuration_merges_partial_changes(service: TaxService) -> None:
    updated = service.update_configuration({"vatRate": "0.105"}, tax_included_in_price=True)

    assert updated.vat_rate == Decimal("0.105")
    assert updated.tax_included_in_price is True
    assert updated.round_to_cents is True
    assert service.get_configuration() == updated


def test_update_configuration_logs_new_values(
    service: TaxService, caplog: pytest.LogCaptureFixture
) -> None:
    with caplog.at_level(logging.INFO, logger="salestax.backend.app.services.tax_service"):
        service.update_configuration(include_turnover_tax=True)

    assert "Tax configuration updated" in caplog.text


def test_invalid_update_keeps_previous_configuration(service: TaxService) -> None:
    service.update_configuration(vat_rate="0.105")

    with pytest.raises(ConfigurationError):
        service.update_configuration(vat_rate="1.5", tax_included_in_price=True)

    current = service.get_configuration()
    assert current.vat_rate == Decimal("0.105")
    assert current.tax_included_in_price is False


def test_update_configuration_requires_mapping(service: TaxService) -> None:
    with pytest.raises(ConfigurationError, match="mapping"):
        service.update_configuration(["vat_rate"])  # type: ignore[arg-type]


def test_returned_configuration_is_detached(service: TaxService) -> None:
    snapshot = service.get_configuration()

    service.update_configuration(vat_rate=0)

    assert snapshot.vat_rate == Decimal("0.21")


def test_per_call_overrides_do_not_change_default(service: TaxService) -> None:
    result = service.calculate_for_amount(121, {"taxIncludedInPrice": True})

    assert result.subtotal == Decimal("100.00")
    assert service.get_configuration().tax_included_in_price is False
    assert service.calculate_for_amount(100).total_amount == Decimal("121.00")


def test_full_configuration_override_replaces_default(service: TaxService) -> None:
    override = TaxConfiguration(vat_rate="0.105")

    assert service.resolve_configuration(override) is override
    assert service.calculate_for_amount(100, override).vat_amount == Decimal("10.50")


def test_service_calculates_carts_and_reverse(service: TaxService) -> None:
    service.update_configuration(tax_included_in_price=True)

    cart = service.calculate_for_items(
        [
            {"productId": "A", "quantity": 1, "unitPrice": 100, "vatCategory": "STANDARD"},
            {"productId": "B", "quantity": 1, "unitPrice": 100, "vatCategory": "REDUCED"},
        ]
    )
    reverse = service.reverse_calculation(121)

    assert cart.subtotal == Decimal("173.14")
    assert reverse.subtotal == Decimal("100.00")


def test_replace_configuration_swaps_whole_value(service: TaxService) -> None:
    replacement = TaxConfiguration(include_turnover_tax=True)

    service.replace_configuration(replacement)

    assert service.get_configuration() == replacement


def test_format_display_uses_service_currency() -> None:
    service = TaxService(currency_symbol="€")
    result = service.calculate_for_amount(100)

    assert service.format_display(result)["total_amount"] == "€121.00"
    assert service.format_display(result, "$")["vat_amount"] == "$21.00"


def test_concurrent_updates_never_expose_partial_configuration(service: TaxService) -> None:
    first = {"vat_rate": "0.105", "include_turnover_tax": True}
    second = {"vat_rate": "0.21", "include_turnover_tax": False}

    def update(index: int) -> TaxConfiguration:
        service.update_configuration(first if index % 2 else second)
        return service.get_configuration()

    with ThreadPoolExecutor(max_workers=8) as executor:
        observed = list(executor.map(update, range(64)))

    for config in observed:
        pair = (config.vat_rate, config.include_turnover_tax)
        assert pair in {(Decimal("0.105"), True), (Decimal("0.21"), False)}


def test_stateless_shortcuts_use_library_defaults() -> None:
    assert calculate_taxes(100).total_amount == Decimal("121.00")
    assert calculate_taxes(100, {"vat_rate": "0.105"}).vat_amount == Decimal("10.50")
    assert calculate_cart_taxes(
        [{"productId": "A", "quantity": 2, "unitPrice": 10, "vatCategory": "EXEMPT"}]
    ).total_amount == Decimal("20.00")


def test_tax_amount_and_subtotal_helpers_read_final_prices() -> None:
    assert get_tax_amount(121) == Decimal("21.00")
    assert get_subtotal(121) == Decimal("100.00")
    assert get_tax_amount(0) == 0
