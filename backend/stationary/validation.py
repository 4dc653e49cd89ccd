from __future__ import annotations

from typing import Any, Iterable

from .errors import StationaryError


# Field length limits for operator-entered text
MAX_NAME_LENGTH = 255
MAX_ID_LENGTH = 64


class ValidationError(StationaryError):
    """Input problem: a field is missing, blank, or the wrong type."""


class ConflictError(StationaryError):
    """Business rule conflict (e.g., duplicate employee id)."""


def coerce_int(key: str, value: Any, *, minimum: int | None = None) -> int:
    """
    Strict integer parsing for quantities and thresholds.

    Accepts ints and plain digit strings. Rejects bools, floats, decimals and
    scientific notation so that "12.5" or "1e3" never silently become stock.
    """
    if value is None:
        raise ValidationError(f"{key} is required")

    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")

    if isinstance(value, int):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer")
        # Reject scientific notation (e.g., "1e15", "1E10")
        if 'e' in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
        # Reject decimal points (e.g., "12.5")
        if '.' in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)")
        try:
            result = int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")
    elif isinstance(value, float):
        raise ValidationError(f"{key} must be an integer, not a decimal")
    else:
        raise ValidationError(f"{key} must be an integer")

    if minimum is not None and result < minimum:
        raise ValidationError(f"{key} must be >= {minimum}")
    return result


def coerce_text(
    key: str,
    value: Any,
    *,
    required: bool = True,
    max_length: int = MAX_NAME_LENGTH,
) -> str | None:
    """Strip a text field; blank required fields are rejected."""
    if value is None:
        if required:
            raise ValidationError(f"{key} is required")
        return None

    text = str(value).strip()
    if required and text == "":
        raise ValidationError(f"{key} cannot be blank")
    if len(text) > max_length:
        raise ValidationError(f"{key} exceeds max length {max_length}")
    return text


def require_fields(payload: Any, fields: Iterable[str], label: str) -> dict:
    """Check a mapping carries every field in `fields`; returns it unchanged."""
    if not isinstance(payload, dict):
        raise ValidationError(f"{label} must be an object")
    missing = [f for f in fields if f not in payload]
    if missing:
        raise ValidationError(f"{label} is missing required fields: {', '.join(missing)}")
    return payload
