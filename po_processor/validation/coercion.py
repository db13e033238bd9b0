"""Helpers shared by the validator and the record builder."""

import math
import re
from collections.abc import Mapping
from datetime import datetime
from typing import Any

_NUMBER_NOISE_RE = re.compile(r"[\s,$€£]")


def get_path(data: Any, dotted: str) -> Any:
    """Walk ``a.b.c`` through nested mappings; missing keys yield ``None``."""
    value = data
    for part in dotted.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def coerce_number(value: Any) -> tuple[float | None, bool]:
    """Return ``(number, converted_from_text)``; ``None`` when not numeric."""
    if isinstance(value, bool):
        return None, False
    if isinstance(value, (int, float)):
        number = float(value)
        return (number, False) if math.isfinite(number) else (None, False)
    if isinstance(value, str):
        cleaned = _NUMBER_NOISE_RE.sub("", value)
        if not cleaned:
            return None, False
        try:
            number = float(cleaned)
        except ValueError:
            return None, False
        return (number, True) if math.isfinite(number) else (None, False)
    return None, False


def normalize_date(value: Any, formats: tuple[str, ...]) -> str | None:
    """Parse ``value`` with the first matching format and return ``YYYY-MM-DD``."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    return None


def text_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
