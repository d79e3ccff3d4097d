"""REST endpoints for tax calculations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from salestax.backend.app.http import app_state
from salestax.backend.services import (
    build_calculation_response,
    calculate_amount,
    calculate_cart,
    calculate_reverse,
    parse_calculation_payload,
)

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1/calculations")


@blueprint.post("/amount")
def create_amount_calculation() -> tuple[Any, int]:
    """Split a single amount into subtotal and taxes."""

    state = app_state()
    payload = parse_calculation_payload(request)
    result = calculate_amount(
        payload, state.tax_service, default_locale=state.settings.default_locale
    )
    return build_calculation_response(result)


@blueprint.post("/reverse")
def create_reverse_calculation() -> tuple[Any, int]:
    """Decompose a known total into subtotal and taxes."""

    state = app_state()
    payload = parse_calculation_payload(request)
    result = calculate_reverse(
        payload, state.tax_service, default_locale=state.settings.default_locale
    )
    return build_calculation_response(result)


@blueprint.post("/cart")
def create_cart_calculation() -> tuple[Any, int]:
    """Calculate taxes for every line of a cart."""

    state = app_state()
    payload = parse_calculation_payload(request)
    result = calculate_cart(
        payload, state.tax_service, default_locale=state.settings.default_locale
    )
    return build_calculation_response(result)
