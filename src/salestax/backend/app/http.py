"""HTTP helper utilities shared across Flask blueprints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from flask import current_app, jsonify

from salestax.backend.app.services.tax_service import TaxService
from salestax.backend.config.schema import ServiceSettings

EXTENSION_KEY = "salestax"


@dataclass(frozen=True)
class ProblemResponse:
    """Lightweight representation of an RFC 7807-style error payload."""

    error: str
    status: int
    message: str | None = None
    extra: Mapping[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return the serialisable payload for this problem response."""

        payload: dict[str, Any] = {"error": self.error}
        if self.message:
            payload["message"] = self.message
        if self.extra:
            payload.update(self.extra)
        return payload

    def to_response(self) -> tuple[Any, int]:
        """Convert the problem payload into a Flask response tuple."""

        return jsonify(self.as_dict()), self.status


def problem_response(
    error: str,
    *,
    status: int,
    message: str | None = None,
    **extra: Any,
) -> ProblemResponse:
    """Convenience factory mirroring Flask's ``jsonify`` interface."""

    additional: Mapping[str, Any] | None = extra or None
    return ProblemResponse(error=error, status=status, message=message, extra=additional)


@dataclass(frozen=True)
class AppState:
    """Per-application objects shared by the blueprints."""

    settings: ServiceSettings
    tax_service: TaxService


def app_state() -> AppState:
    """Return the state registered on the current Flask application."""

    return current_app.extensions[EXTENSION_KEY]


__all__ = ["AppState", "EXTENSION_KEY", "ProblemResponse", "app_state", "problem_response"]
