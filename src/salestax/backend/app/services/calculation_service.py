"""Orchestrate request validation, tax calculations, and response shaping.

HTTP routes hand raw JSON payloads to this module. It validates them against
the shared request models, resolves the effective configuration through the
:class:`TaxService` facade, runs the calculators, and assembles a localized
response. Profiling hooks live here so the calculators stay pure.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from time import perf_counter
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from salestax.backend.app.localization import Translator, get_translator
from salestax.backend.app.models import (
    AmountCalculationRequest,
    CalculationResponse,
    CartCalculationRequest,
    LineBreakdown,
    TaxResult,
    format_validation_error,
)
from salestax.backend.config.schema import TaxConfiguration

from .calculators import calculate_cart_breakdown, format_percentage
from .formatter import format_line
from .tax_service import TaxService

_LOGGER = logging.getLogger(__name__)

_PROFILE_ENV = "SALESTAX_PROFILE_CALCULATIONS"

_RESULT_FIELDS = (
    "subtotal",
    "vat_amount",
    "turnover_tax_amount",
    "total_taxes",
    "total_amount",
    "effective_tax_rate",
)

RequestModel = TypeVar("RequestModel", bound=BaseModel)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv(_PROFILE_ENV, "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _parse_request(
    model: type[RequestModel], payload: Mapping[str, Any] | RequestModel
) -> RequestModel:
    if isinstance(payload, model):
        return payload
    if not isinstance(payload, Mapping):
        raise ValueError("Payload must be a mapping")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc)) from exc


def _build_labels(translator: Translator) -> dict[str, str]:
    return {field: translator(f"result.{field}") for field in _RESULT_FIELDS}


def _build_response(
    operation: str,
    result: TaxResult,
    configuration: TaxConfiguration,
    service: TaxService,
    translator: Translator,
    lines: list[LineBreakdown] | None = None,
) -> dict[str, Any]:
    display = service.format_display(result)
    display["effective_tax_rate"] = format_percentage(result.effective_tax_rate)

    payload: dict[str, Any] = {
        "result": result.as_dict(),
        "display": display,
        "labels": _build_labels(translator),
        "meta": {
            "operation": operation,
            "locale": translator.locale,
            "currency_symbol": service.currency_symbol,
            "configuration": configuration.as_payload(),
        },
    }
    if lines is not None:
        payload["lines"] = [format_line(line) for line in lines]

    response_model = CalculationResponse.model_validate(payload)
    return response_model.model_dump(mode="json", exclude_none=True)


def _log_timings(operation: str, timings: dict[str, float] | None, start: float | None) -> None:
    if timings is None or start is None:
        return
    timings["total"] = perf_counter() - start
    _LOGGER.debug(
        "%s timings (ms): %s",
        operation,
        {name: round(duration * 1000, 3) for name, duration in timings.items()},
    )


def _calculate_single(
    operation: str,
    payload: Mapping[str, Any] | AmountCalculationRequest,
    service: TaxService,
    default_locale: str,
) -> dict[str, Any]:
    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    start = perf_counter() if timings is not None else None

    with _profile_section("parse", timings):
        request_model = _parse_request(AmountCalculationRequest, payload)
        configuration = service.resolve_configuration(request_model.configuration)

    with _profile_section("calculate", timings):
        if operation == "reverse":
            result = service.reverse_calculation(request_model.amount, configuration)
        else:
            result = service.calculate_for_amount(request_model.amount, configuration)

    translator = get_translator(request_model.locale or default_locale)
    response = _build_response(operation, result, configuration, service, translator)
    _log_timings(operation, timings, start)
    return response


def calculate_amount(
    payload: Mapping[str, Any] | AmountCalculationRequest,
    service: TaxService,
    *,
    default_locale: str = "en",
) -> dict[str, Any]:
    """Compute the tax breakdown for a single amount payload."""

    return _calculate_single("amount", payload, service, default_locale)


def calculate_reverse(
    payload: Mapping[str, Any] | AmountCalculationRequest,
    service: TaxService,
    *,
    default_locale: str = "en",
) -> dict[str, Any]:
    """Decompose a known total through the reverse entry point."""

    return _calculate_single("reverse", payload, service, default_locale)


def calculate_cart(
    payload: Mapping[str, Any] | CartCalculationRequest,
    service: TaxService,
    *,
    default_locale: str = "en",
) -> dict[str, Any]:
    """Compute the tax breakdown for a cart payload, including per-line detail."""

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    start = perf_counter() if timings is not None else None

    with _profile_section("parse", timings):
        request_model = _parse_request(CartCalculationRequest, payload)
        configuration = service.resolve_configuration(request_model.configuration)

    with _profile_section("calculate", timings):
        result, lines = calculate_cart_breakdown(request_model.items, configuration)

    translator = get_translator(request_model.locale or default_locale)
    response = _build_response("cart", result, configuration, service, translator, lines)
    _log_timings("cart", timings, start)
    return response


__all__ = ["calculate_amount", "calculate_cart", "calculate_reverse"]
