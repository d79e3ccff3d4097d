"""Application factory for SalesTax backend services."""

import logging
import os
from warnings import warn

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import BadRequest

from salestax.backend.config.schema import ConfigurationError, ServiceSettings
from salestax.backend.config.settings import load_settings
from salestax.backend.version import get_project_version

from .http import EXTENSION_KEY, AppState, problem_response
from .routes import register_routes
from .services.tax_service import TaxService

_LOGGER = logging.getLogger(__name__)

ALLOWED_ORIGINS_ENV = "SALESTAX_ALLOWED_ORIGINS"


def _parse_allowed_origins(raw: str | None) -> set[str]:
    """Convert an environment variable into a normalised set of origins."""

    if not raw:
        return set()

    return {origin.strip() for origin in raw.split(",") if origin.strip()}


def create_app(settings: ServiceSettings | None = None) -> Flask:
    """Create and configure the Flask application instance.

    ``settings`` defaults to the YAML file resolved by
    :func:`salestax.backend.config.settings.load_settings`. Each application
    owns its own :class:`TaxService`, so configuration updates made through
    one app never leak into another.
    """

    app = Flask(__name__)

    if settings is None:
        settings = load_settings()

    app.extensions[EXTENSION_KEY] = AppState(
        settings=settings,
        tax_service=TaxService(
            settings.tax_configuration(),
            currency_symbol=settings.currency_symbol,
        ),
    )

    allowed_origins = _parse_allowed_origins(os.getenv(ALLOWED_ORIGINS_ENV))

    if not allowed_origins:
        warn(
            "No allowed origins configured; cross-origin requests will be rejected.",
            stacklevel=1,
        )

    CORS(
        app,
        resources={r"/api/*": {"origins": sorted(allowed_origins)}},
        supports_credentials=False,
        methods=["GET", "OPTIONS", "PATCH", "POST"],
        allow_headers=["Content-Type"],
    )

    register_routes(app)

    @app.route("/health", methods=["GET"])
    def health_check():
        """Simple health check endpoint for infrastructure monitoring."""

        return jsonify({"status": "ok", "version": get_project_version()})

    @app.errorhandler(BadRequest)
    def handle_bad_request(error: BadRequest):
        """Return consistent JSON responses for malformed payloads."""

        message = error.description or "Invalid request"
        return problem_response("bad_request", status=400, message=message).to_response()

    @app.errorhandler(ConfigurationError)
    def handle_configuration_error(error: ConfigurationError):
        """Reject configuration values the calculators cannot work with."""

        _LOGGER.warning("Rejected tax configuration: %s", error)
        return problem_response(
            "configuration_error", status=422, message=str(error)
        ).to_response()

    @app.errorhandler(ValueError)
    def handle_value_error(error: ValueError):
        """Gracefully surface domain validation errors to clients."""

        return problem_response(
            "validation_error", status=400, message=str(error)
        ).to_response()

    return app
