#!/usr/bin/env python3
"""Validate label catalogues against each other and against backend usage."""

from __future__ import annotations

import argparse
import ast
import json
import re
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
TRANSLATIONS_DIR = REPO_ROOT / "src" / "salestax" / "translations"
BACKEND_DIR = REPO_ROOT / "src" / "salestax" / "backend"

PLACEHOLDER_PATTERN = re.compile(r"{{\s*([a-zA-Z0-9_.-]+)\s*}}")


class CatalogueError(Exception):
    """Raised when a catalogue cannot be read at all."""


def _load_catalogues() -> dict[str, dict[str, str]]:
    if not TRANSLATIONS_DIR.is_dir():
        raise CatalogueError(f"Missing translations directory: {TRANSLATIONS_DIR}")

    catalogues: dict[str, dict[str, str]] = {}
    for path in sorted(TRANSLATIONS_DIR.glob("*.json")):
        with path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)

        labels = payload.get("labels") if isinstance(payload, dict) else None
        if not isinstance(labels, dict):
            raise CatalogueError(f"Catalogue must define a 'labels' mapping: {path}")
        catalogues[path.stem] = {str(key): str(value) for key, value in labels.items()}

    if not catalogues:
        raise CatalogueError("No translation catalogues discovered")
    return catalogues


def _missing_keys(catalogues: dict[str, dict[str, str]], base_locale: str) -> list[str]:
    expected = set(catalogues[base_locale])
    issues: list[str] = []
    for locale, labels in sorted(catalogues.items()):
        missing = expected - set(labels)
        extra = set(labels) - expected
        if missing:
            issues.append(f"Locale '{locale}' missing keys: {', '.join(sorted(missing))}")
        if extra:
            issues.append(f"Locale '{locale}' has unknown keys: {', '.join(sorted(extra))}")
    return issues


def _placeholder_inconsistencies(catalogues: dict[str, dict[str, str]]) -> list[str]:
    by_key: dict[str, dict[str, frozenset[str]]] = {}
    for locale, labels in catalogues.items():
        for key, message in labels.items():
            by_key.setdefault(key, {})[locale] = frozenset(PLACEHOLDER_PATTERN.findall(message))

    issues: list[str] = []
    for key, locale_map in sorted(by_key.items()):
        if len(set(locale_map.values())) > 1:
            details = ", ".join(
                f"{locale}={{{', '.join(sorted(values))}}}"
                for locale, values in sorted(locale_map.items())
            )
            issues.append(f"{key} placeholders differ: {details}")
    return issues


def _collect_backend_usage() -> tuple[set[str], set[str]]:
    """Return literal keys and f-string prefixes passed to translator calls."""

    used_keys: set[str] = set()
    prefixes: set[str] = set()

    for path in BACKEND_DIR.rglob("*.py"):
        tree = ast.parse(path.read_text(encoding="utf-8"))
        for node in ast.walk(tree):
            if not isinstance(node, ast.Call) or not node.args:
                continue
            func = node.func
            name = func.id if isinstance(func, ast.Name) else getattr(func, "attr", None)
            if name != "translator":
                continue

            argument = node.args[0]
            if isinstance(argument, ast.Constant) and isinstance(argument.value, str):
                used_keys.add(argument.value)
            elif isinstance(argument, ast.JoinedStr) and argument.values:
                head = argument.values[0]
                if isinstance(head, ast.Constant) and isinstance(head.value, str):
                    prefixes.add(head.value)

    return used_keys, prefixes


def _unused_keys(labels: dict[str, str]) -> list[str]:
    used_keys, prefixes = _collect_backend_usage()
    return [
        key
        for key in sorted(labels)
        if key not in used_keys and not any(key.startswith(prefix) for prefix in prefixes)
    ]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--fail-on-unused",
        action="store_true",
        help="Exit with an error if unused keys are found",
    )
    args = parser.parse_args(argv)

    try:
        catalogues = _load_catalogues()
    except CatalogueError as error:
        print(f"[error] {error}")
        return 1

    base_locale = "en" if "en" in catalogues else sorted(catalogues)[0]

    missing = _missing_keys(catalogues, base_locale)
    inconsistencies = _placeholder_inconsistencies(catalogues)
    unused = _unused_keys(catalogues[base_locale])

    for issue in missing:
        print(f"[missing] {issue}")
    for issue in inconsistencies:
        print(f"[placeholder] {issue}")
    if unused:
        print("[unused] Keys never requested by the backend:")
        for key in unused:
            print(f"  - {key}")

    if missing or inconsistencies or (unused and args.fail_on_unused):
        return 1

    print(f"{len(catalogues)} catalogue(s) OK: {', '.join(sorted(catalogues))}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
