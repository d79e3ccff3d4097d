"""Unit tests for calculation request parsing helpers."""

from __future__ import annotations

import pytest
from flask import Flask, request
from werkzeug.exceptions import BadRequest

from salestax.backend.services.request_parser import (
    parse_calculation_payload,
    parse_json_object,
)


def test_parse_payload_uses_accept_language(app: Flask) -> None:
    """Accept-Language header should supply the locale when absent."""

    with app.test_request_context(
        "/api/v1/calculations/amount",
        method="POST",
        json={"amount": 100},
        headers={"Accept-Language": "es-AR;q=0.9, en;q=0.8"},
    ):
        payload = parse_calculation_payload(request)

    assert payload["locale"] == "es"


def test_parse_payload_prefers_query_parameter_over_header(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations/amount?locale=en",
        method="POST",
        json={"amount": 100},
        headers={"Accept-Language": "es"},
    ):
        payload = parse_calculation_payload(request)

    assert payload["locale"] == "en"


def test_parse_payload_preserves_explicit_locale(app: Flask) -> None:
    """Explicit locale fields should be normalised without overrides."""

    with app.test_request_context(
        "/api/v1/calculations/amount?locale=en",
        method="POST",
        json={"amount": 100, "locale": "ES"},
    ):
        payload = parse_calculation_payload(request)

    assert payload["locale"] == "es"


def test_parse_payload_leaves_locale_unset_without_hints(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/calculations/amount", method="POST", json={"amount": 100}
    ):
        payload = parse_calculation_payload(request)

    assert "locale" not in payload


def test_parse_payload_rejects_non_object(app: Flask) -> None:
    """Non-object JSON payloads should trigger BadRequest responses."""

    with app.test_request_context(
        "/api/v1/calculations/amount",
        method="POST",
        json=["not", "an", "object"],
    ):
        with pytest.raises(BadRequest):
            parse_calculation_payload(request)


def test_parse_json_object_rejects_invalid_json(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/config",
        method="PATCH",
        data="{not json",
        content_type="application/json",
    ):
        with pytest.raises(BadRequest, match="valid JSON"):
            parse_json_object(request)
