"""Test configuration utilities and shared fixtures."""

import sys
from pathlib import Path

# Ensure the ``src`` directory is importable when tests are executed without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from flask import Flask  # noqa: E402
from flask.testing import FlaskClient  # noqa: E402

from salestax.backend.app import create_app  # noqa: E402
from salestax.backend.app.services.tax_service import TaxService  # noqa: E402
from salestax.backend.config.settings import SETTINGS_ENV, clear_settings_cache  # noqa: E402


@pytest.fixture(autouse=True)
def packaged_settings(monkeypatch: pytest.MonkeyPatch):
    """Run every test against the settings file shipped with the package."""

    monkeypatch.delenv(SETTINGS_ENV, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture()
def app() -> Flask:
    """Return a configured Flask application for integration tests."""

    application = create_app()
    application.config.update(TESTING=True)
    return application


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Provide a test client bound to the configured Flask app."""

    return app.test_client()


@pytest.fixture()
def service() -> TaxService:
    """Return a facade holding the library default configuration."""

    return TaxService()
