"""Regression coverage ensuring calculator outputs stay stable."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

import pytest

from salestax.backend.app.services.calculation_service import (
    calculate_amount,
    calculate_cart,
    calculate_reverse,
)
from salestax.backend.app.services.tax_service import TaxService

_DATA_PATH = Path(__file__).resolve().parents[1] / "data" / "regression_scenarios.json"

_OPERATIONS = {
    "amount": calculate_amount,
    "reverse": calculate_reverse,
    "cart": calculate_cart,
}


@pytest.mark.parametrize(
    "scenario",
    json.loads(_DATA_PATH.read_text("utf-8")),
    ids=lambda item: item["name"],
)
def test_calculation_matches_regression_scenario(scenario: dict[str, object]) -> None:
    """The calculation service returns the expected results for known payloads."""

    operation = _OPERATIONS[scenario["operation"]]

    response = operation(scenario["payload"], TaxService())

    result = response["result"]
    for key, value in scenario["expectations"].items():
        assert Decimal(result[key]) == Decimal(value), key
