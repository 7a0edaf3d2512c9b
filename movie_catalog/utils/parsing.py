"""
Parse-or-null helpers for upstream numeric fields.

Upstream APIs (OMDb in particular) encode numbers as display strings such as
``"7.8"``, ``"1,234,567"``, ``"85%"`` or ``"75/100"`` and use ``"N/A"`` when a
value is unknown. Every helper here returns ``None`` for anything it cannot read;
none of them raise.
"""

from __future__ import annotations

import math
import re

NOT_AVAILABLE = "N/A"

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_LEADING_FLOAT_RE = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))")


def _as_text(value: object) -> str | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text or text.upper() == NOT_AVAILABLE:
        return None
    return text


def parse_float_or_none(value: object) -> float | None:
    """Leading float of `value` (``"7.8"`` -> 7.8); `None` for N/A, NaN or garbage."""

    text = _as_text(value)
    if text is None:
        return None
    match = _LEADING_FLOAT_RE.match(text)
    if not match:
        return None
    result = float(match.group(1))
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def parse_int_or_none(value: object) -> int | None:
    """Leading integer after stripping thousands separators (``"1,234"`` -> 1234)."""

    if isinstance(value, float):
        return None if math.isnan(value) or math.isinf(value) else int(value)
    text = _as_text(value)
    if text is None:
        return None
    match = _LEADING_INT_RE.match(text.replace(",", ""))
    if not match:
        return None
    return int(match.group(1))


def _score_or_none(value: int | None) -> int | None:
    if value is None or value < 0 or value > 100:
        return None
    return value


def parse_percent(value: object) -> int | None:
    # "85%"
    text = _as_text(value)
    if text is None:
        return None
    return _score_or_none(parse_int_or_none(text.replace("%", "")))


def parse_out_of_100(value: object) -> int | None:
    # "75/100"
    text = _as_text(value)
    if text is None:
        return None
    return _score_or_none(parse_int_or_none(text.split("/", 1)[0]))


def parse_release_year(value: object) -> int | None:
    """Year from an ISO-ish date string (``"1999-03-31"`` -> 1999)."""

    if not isinstance(value, str) or len(value.strip()) < 4:
        return None
    head = value.strip()[:4]
    return int(head) if head.isdigit() else None
