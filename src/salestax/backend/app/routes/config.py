"""Expose and update the tax configuration used by the dashboard.

The settings screen reads the active configuration from here and writes
partial updates back; checkout widgets read the rate table to label cart
lines.
"""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request

from salestax.backend.app.http import app_state
from salestax.backend.app.localization import get_translator
from salestax.backend.config.rates import VatCategory, rate_table
from salestax.backend.services import parse_json_object

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def _configuration_payload() -> dict[str, Any]:
    state = app_state()
    return {
        "configuration": state.tax_service.get_configuration().as_payload(),
        "currency_symbol": state.tax_service.currency_symbol,
        "default_locale": state.settings.default_locale,
    }


@blueprint.get("")
def get_configuration():
    """Return the configuration currently applied to calculations."""

    return jsonify(_configuration_payload()), 200


@blueprint.patch("")
def update_configuration():
    """Merge the submitted fields into the active configuration."""

    changes = parse_json_object(request)
    app_state().tax_service.update_configuration(changes)
    return jsonify(_configuration_payload()), 200


@blueprint.get("/rates")
def get_rates():
    """Return the VAT and turnover tax rate table with localized labels."""

    translator = get_translator(
        request.args.get("locale") or app_state().settings.default_locale
    )
    payload: dict[str, Any] = rate_table()
    payload["vat_labels"] = {
        category.value: translator(f"category.{category.value}")
        for category in VatCategory
    }
    payload["locale"] = translator.locale
    return jsonify(payload), 200
