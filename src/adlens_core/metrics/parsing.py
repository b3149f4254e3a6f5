"""Numeric parsing and action-type normalization for Graph insight rows."""
import math
from typing import Any, Optional

from ..meta.constants import (
    ACTION_TYPE_LABELS,
    DEFAULT_ATTRIBUTION_WINDOWS,
    DEFAULT_RESULT_LABEL,
    LEAD_ACTION_TYPES,
)
from ..schemas.graph import ActionEntry


def parse_number(value: Any) -> float:
    """Parse a Graph numeric field; absent or invalid values count as 0."""
    if value is None or value == "" or isinstance(value, bool):
        return 0.0
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def parse_percent_to_number(value: Any) -> Optional[float]:
    """Convert a percentage string (``"2.5"``) to a fraction (``0.025``)."""
    if value is None or value == "":
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed):
        return None
    return parsed / 100


def normalize_action_type(action_type: Optional[str]) -> Optional[str]:
    if not action_type or not isinstance(action_type, str):
        return None
    normalized = action_type.strip().lower()
    return normalized or None


def format_result_label(action_type: Optional[str]) -> str:
    """Human-readable label for a canonical action type.

    Lookup table first, then "Leads" for lead-like types, then a title-cased
    rendering of the raw type (``onsite_conversion.foo`` -> ``Onsite Conversion Foo``).
    """
    if not action_type:
        return DEFAULT_RESULT_LABEL

    normalized = action_type.lower()

    mapped = ACTION_TYPE_LABELS.get(normalized)
    if mapped:
        return mapped

    if normalized in LEAD_ACTION_TYPES:
        return "Leads"

    words = normalized.replace("_", " ").replace(".", " ").split()
    return " ".join(word.capitalize() for word in words)


def extract_entry_total(entry: ActionEntry) -> float:
    """Best-effort numeric total of an action entry.

    1. the direct ``value``;
    2. else the sum of the requested attribution windows;
    3. else the sum of every other numeric-looking field.
    """
    direct = parse_number(entry.value)
    if direct > 0:
        return direct

    windows = entry.attribution_windows

    total = 0.0
    for window_key in DEFAULT_ATTRIBUTION_WINDOWS:
        total += parse_number(windows.get(window_key))
    if total > 0:
        return total

    total = 0.0
    for raw in windows.values():
        total += parse_number(raw)

    return max(total, 0.0)
