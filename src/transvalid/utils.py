"""Small helpers shared by the validator, options and engine."""

from __future__ import annotations

import re

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)")

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_SIZE_RE = re.compile(r"([0-9]+(?:\.[0-9]+)?)\s*([KMGT]?B)?", re.IGNORECASE)
_SIZE_UNITS = {"B": 1, "KB": 1024, "MB": 1024**2, "GB": 1024**3, "TB": 1024**4}


def parse_numeric(value: str) -> int | float | None:
    """Parse a rule parameter into an integer or a float.

    Integer parsing is tried first and only plain base-10 digits with an
    optional sign are accepted. Values that do not fit a signed 64 bit
    integer fall through to the float branch.

    Args:
        value: Raw parameter string

    Returns:
        The parsed ``int`` or ``float``, or None when the value is not numeric
    """
    if _INT_RE.fullmatch(value):
        number = int(value)
        if _INT64_MIN <= number <= _INT64_MAX:
            return number

    if _FLOAT_RE.fullmatch(value):
        return float(value)

    return None


def coerce_param(value: str) -> tuple[str | int | float, int]:
    """Split a rule parameter into its display value and plural count.

    Returns:
        ``(param, count)`` where count truncates floats toward zero and is 0
        for non-numeric parameters
    """
    number = parse_numeric(value)
    if number is None:
        return value, 0
    return number, int(number)


def parse_size(value: str) -> int | None:
    """Parse a byte size such as ``"512"``, ``"1KB"`` or ``"1.5 MB"``.

    Units are 1024 based and case-insensitive; a bare number is bytes.

    Returns:
        Size in bytes (fractions truncated), or None when malformed
    """
    match = _SIZE_RE.fullmatch(value.strip())
    if match is None:
        return None
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[(unit or "B").upper()])


def to_chars(value: str) -> list[str]:
    """Split a string into single characters (code points)."""
    return list(value)


def resolve_param(fallback: str, value: str | None = None) -> str:
    """Return the stripped value, or fallback when it is missing or blank."""
    if value is not None and value.strip():
        return value.strip()
    return fallback


def resolve_messages(messages: dict[str, str] | None, default: str) -> dict[str, str]:
    """Return messages, or a mapping of the default locale to default."""
    if messages is None:
        return {"": default}
    return messages
