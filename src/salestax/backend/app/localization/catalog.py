"""Label catalogue helpers backed by shared JSON resources."""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import cache
from importlib import resources
from typing import Any, Mapping

_BASE_LOCALE = "en"
_TRANSLATIONS_PACKAGE = "salestax.translations"


@dataclass(frozen=True)
class Translator:
    """Callable helper for retrieving localized labels."""

    locale: str
    _messages: Mapping[str, str]
    _fallback: Mapping[str, str]

    def __call__(self, key: str) -> str:
        return self._messages.get(key) or self._fallback.get(key, key)


@cache
def available_locales() -> tuple[str, ...]:
    """Return the locales with a published catalogue."""

    root = resources.files(_TRANSLATIONS_PACKAGE)
    locales = sorted(
        entry.name.removesuffix(".json")
        for entry in root.iterdir()
        if entry.name.endswith(".json")
    )
    return tuple(locales) or (_BASE_LOCALE,)


@cache
def _load_labels(locale: str) -> Mapping[str, str]:
    resource = resources.files(_TRANSLATIONS_PACKAGE).joinpath(f"{locale}.json")
    if not resource.is_file():
        return {}

    with resource.open("r", encoding="utf-8") as handle:
        payload: Any = json.load(handle)

    labels = payload.get("labels") if isinstance(payload, dict) else None
    if not isinstance(labels, dict):
        return {}
    return {str(key): str(value) for key, value in labels.items()}


def normalise_locale(locale: str | None) -> str:
    """Normalise requested locale to a supported catalogue key."""

    if not locale:
        return _BASE_LOCALE

    normalized = locale.strip().lower().replace("_", "-").split("-")[0]
    return normalized if normalized in available_locales() else _BASE_LOCALE


def get_translator(locale: str | None = None) -> Translator:
    """Return a translator for ``locale`` falling back to English labels."""

    normalized = normalise_locale(locale)
    return Translator(
        locale=normalized,
        _messages=_load_labels(normalized),
        _fallback=_load_labels(_BASE_LOCALE),
    )


def load_translations(locale: str | None = None) -> dict[str, Any]:
    """Expose a locale's labels together with the English fallback."""

    normalized = normalise_locale(locale)
    return {
        "locale": normalized,
        "available_locales": list(available_locales()),
        "labels": dict(_load_labels(normalized)),
        "fallback": {
            "locale": _BASE_LOCALE,
            "labels": dict(_load_labels(_BASE_LOCALE)),
        },
    }


__all__ = [
    "Translator",
    "available_locales",
    "get_translator",
    "load_translations",
    "normalise_locale",
]
