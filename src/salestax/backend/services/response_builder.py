"""Utilities for serialising calculation responses."""

from __future__ import annotations

from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from flask import Response, jsonify


def build_calculation_response(
    payload: Mapping[str, Any], status: int = HTTPStatus.OK
) -> tuple[Response, int]:
    """Return a Flask JSON response for the calculation ``payload``.

    Results depend on the live configuration, so intermediaries must not
    cache them.
    """

    response = jsonify(payload)
    response.headers["Cache-Control"] = "no-store"
    return response, int(status)
