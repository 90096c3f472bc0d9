"""Locale-aware parsing of numbers stored as text."""

from __future__ import annotations

import re
from typing import Any

from broker_report_fixer.models import NumberLocale

# (group separators, decimal separator) per report locale.
_LOCALE_SEPARATORS: dict[str, tuple[str, str]] = {
    "ru": (" \u00a0\u202f", ","),
    "en": (",", "."),
}

_PATTERNS: dict[str, re.Pattern[str]] = {}


def _number_pattern(locale: NumberLocale) -> re.Pattern[str]:
    pattern = _PATTERNS.get(locale)
    if pattern is None:
        groups, decimal = _LOCALE_SEPARATORS[locale]
        group_cls = "[" + re.escape(groups) + "]"
        pattern = re.compile(
            rf"^[+-]?(?:\d+(?:{group_cls}\d+)*)?(?:{re.escape(decimal)}\d*)?$"
        )
        _PATTERNS[locale] = pattern
    return pattern


def _normalize_numeric_token(token: str, *, locale: NumberLocale) -> str | None:
    token = token.strip()
    if not any(ch.isdigit() for ch in token):
        return None
    if not _number_pattern(locale).fullmatch(token):
        return None

    groups, decimal = _LOCALE_SEPARATORS[locale]
    for sep in groups:
        token = token.replace(sep, "")
    return token.replace(decimal, ".")


def parse_number(token: str, *, locale: NumberLocale = "ru") -> float | None:
    """Parse *token* as a number written in *locale*, or return ``None``.

    ``"1 234,56"`` and ``"-100,5"`` parse in ``ru``; dates such as
    ``"01.01.2024"`` and plain words do not.
    """
    normalized = _normalize_numeric_token(token, locale=locale)
    if normalized is None:
        return None
    try:
        return float(normalized)
    except ValueError:
        return None


def coerce_value(value: Any, *, locale: NumberLocale = "ru") -> Any:
    """Return the parsed number for numeric text, otherwise *value* unchanged."""
    if not isinstance(value, str):
        return value
    parsed = parse_number(value, locale=locale)
    return value if parsed is None else parsed
