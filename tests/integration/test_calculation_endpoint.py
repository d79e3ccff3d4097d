"""Integration tests for the tax calculation REST endpoints."""

from __future__ import annotations

import json
from decimal import Decimal
from http import HTTPStatus
from pathlib import Path
from typing import Dict, Iterable

import pytest
from flask.testing import FlaskClient

DATA_PATH = Path(__file__).resolve().parents[1] / "data" / "regression_scenarios.json"


def _load_scenarios() -> Iterable[Dict[str, object]]:
    with DATA_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


@pytest.mark.parametrize("scenario", _load_scenarios(), ids=lambda item: item["name"])
def test_calculation_endpoints_match_regression_scenarios(
    client: FlaskClient, scenario: Dict[str, object]
) -> None:
    """Each regression scenario should remain stable over time."""

    response = client.post(
        f"/api/v1/calculations/{scenario['operation']}", json=scenario["payload"]
    )
    assert response.status_code == HTTPStatus.OK

    result = response.get_json()["result"]
    for key, value in scenario["expectations"].items():
        assert Decimal(result[key]) == Decimal(value), key


def test_amount_endpoint_uses_settings_locale_by_default(client: FlaskClient) -> None:
    response = client.post("/api/v1/calculations/amount", json={"amount": 100})

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["meta"]["locale"] == "es"
    assert payload["labels"]["vat_amount"] == "IVA"
    assert payload["display"]["total_amount"] == "$121.00"
    assert response.headers["Cache-Control"] == "no-store"


def test_amount_endpoint_uses_accept_language_header(client: FlaskClient) -> None:
    """Accept-Language header should influence locale if body omits it."""

    response = client.post(
        "/api/v1/calculations/amount",
        json={"amount": 100},
        headers={"Accept-Language": "en-US,en;q=0.9"},
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["meta"]["locale"] == "en"
    assert payload["labels"]["turnover_tax_amount"] == "Turnover tax"


def test_reverse_endpoint_reports_operation(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations/reverse",
        json={"amount": 121, "configuration": {"taxIncludedInPrice": True}},
    )

    payload = response.get_json()
    assert payload["meta"]["operation"] == "reverse"
    assert payload["meta"]["configuration"]["tax_included_in_price"] is True
    assert payload["display"]["subtotal"] == "$100.00"


def test_cart_endpoint_returns_line_breakdown(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations/cart",
        json={
            "items": [
                {"productId": "A", "quantity": 2, "unitPrice": "10", "vatCategory": "REDUCED"},
                {"productId": 7, "quantity": 1, "unitPrice": "5"},
            ],
        },
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert [line["product_id"] for line in payload["lines"]] == ["A", "7"]
    assert payload["lines"][0]["vat_amount"] == "2.10"
    assert payload["lines"][1]["vat_rate"] == "21%"
    assert payload["result"]["vat_amount"] == "3.15"
    assert payload["result"]["total_amount"] == "28.15"


def test_calculation_endpoint_returns_bad_request_for_invalid_json(
    client: FlaskClient,
) -> None:
    """Invalid payloads should return a structured 400 response."""

    response = client.post(
        "/api/v1/calculations/amount",
        data="not-json",
        content_type="text/plain",
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["error"] == "bad_request"
    assert "JSON" in payload["message"].upper()


@pytest.mark.parametrize(
    ("path", "body", "fragment"),
    [
        ("/api/v1/calculations/amount", {"amount": "abc"}, "amount"),
        ("/api/v1/calculations/amount", {"total": 10}, "total"),
        ("/api/v1/calculations/cart", {"items": [{"productId": "A"}]}, "items.0"),
        (
            "/api/v1/calculations/cart",
            {"items": [{"productId": "A", "quantity": 1, "unitPrice": 1, "vatCategory": "LUXURY"}]},
            "vatCategory",
        ),
    ],
)
def test_calculation_endpoint_returns_validation_error(
    client: FlaskClient, path: str, body: dict[str, object], fragment: str
) -> None:
    """Domain validation errors should surface as 400 responses."""

    response = client.post(path, json=body)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["error"] == "validation_error"
    assert payload["message"].startswith("Invalid calculation payload")
    assert fragment in payload["message"]


def test_calculation_endpoint_rejects_out_of_range_configuration(
    client: FlaskClient,
) -> None:
    response = client.post(
        "/api/v1/calculations/amount",
        json={"amount": 100, "configuration": {"vatRate": 2}},
    )

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    payload = response.get_json()
    assert payload["error"] == "configuration_error"
    assert "between 0 and 1" in payload["message"]


def test_calculations_require_post(client: FlaskClient) -> None:
    response = client.get("/api/v1/calculations/amount")

    assert response.status_code == HTTPStatus.METHOD_NOT_ALLOWED
