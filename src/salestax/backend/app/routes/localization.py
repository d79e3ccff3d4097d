"""Expose label catalogues to front-end consumers."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from salestax.backend.app.localization import load_translations

blueprint = Blueprint("translations", __name__, url_prefix="/api/v1/translations")


@blueprint.get("/")
def get_default_translations():
    """Return labels for the requested or default locale."""

    locale_hint = request.args.get("locale")
    return jsonify(load_translations(locale_hint)), 200


@blueprint.get("/<locale>")
def get_locale_translations(locale: str):
    """Return labels for a specific locale slug."""

    return jsonify(load_translations(locale)), 200
