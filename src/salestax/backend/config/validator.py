"""Utilities for validating settings files and surfacing issues."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Sequence

from salestax.backend.app.localization import available_locales

from .schema import ConfigurationError, ServiceSettings, TaxSettings
from .settings import read_settings, settings_path


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_presentation(settings: ServiceSettings) -> list[str]:
    errors: list[str] = []

    if not settings.currency_symbol.strip():
        errors.append(_format_scope("currency_symbol", "must not be blank"))

    locales = available_locales()
    if settings.default_locale not in locales:
        errors.append(
            _format_scope(
                "default_locale",
                f"{settings.default_locale!r} has no catalogue "
                f"(available: {', '.join(locales)})",
            )
        )

    return errors


def _validate_taxes(taxes: TaxSettings) -> list[str]:
    errors: list[str] = []

    try:
        taxes.to_configuration()
    except ConfigurationError as error:
        errors.append(_format_scope("taxes", str(error)))

    turnover_declared = (
        taxes.turnover_region is not None or taxes.turnover_tax_rate is not None
    )
    if not taxes.include_turnover_tax and taxes.turnover_tax_rate is not None:
        errors.append(
            _format_scope(
                "taxes.turnover_tax_rate",
                "is set while include_turnover_tax is disabled",
            )
        )
    if taxes.include_turnover_tax and not turnover_declared:
        errors.append(
            _format_scope(
                "taxes.include_turnover_tax",
                "is enabled without a turnover_region or turnover_tax_rate",
            )
        )

    return errors


def validate_settings(settings: ServiceSettings) -> list[str]:
    """Return human-readable issues detected in ``settings``."""

    errors: list[str] = []
    errors.extend(_validate_presentation(settings))
    errors.extend(_validate_taxes(settings.taxes))
    return errors


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate tax service settings files and report issues."
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=Path,
        help="Settings files to validate (defaults to the active settings file)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    paths = args.paths or [settings_path()]

    exit_code = 0

    for path in paths:
        try:
            settings = read_settings(path)
        except (FileNotFoundError, ConfigurationError) as error:
            print(f"[{path}] failed to load settings: {error}")
            exit_code = 1
            continue

        issues = validate_settings(settings)
        if issues:
            exit_code = 1
            print(f"[{path}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{path}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
