"""Completion timestamp normalization.

Completion dates have been written by several storage drivers over time, so
one field can hold epoch milliseconds as a number, epoch milliseconds as a
numeric string, a ``datetime``/``date``, or an extended-JSON wrapper such as
``{"$date": "2024-01-01T00:00:00Z"}`` or ``{"$date": {"$numberLong": "..."}}``.
Everything is converted to epoch milliseconds before leaving the API.
"""

import math
from datetime import date, datetime, time, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _number(value: int | float) -> int | float:
    if not math.isfinite(value):
        raise ValueError(f"Timestamp is not finite: {value!r}")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _from_numeric_string(value: str) -> int | float:
    text = value.strip()
    if not text:
        raise ValueError("Timestamp string is empty")
    try:
        return _number(int(text))
    except ValueError:
        pass
    try:
        return _number(float(text))
    except ValueError:
        raise ValueError(f"Timestamp string is not numeric: {value!r}") from None


def _from_datetime(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


def _from_iso_string(value: str) -> int:
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return _from_datetime(datetime.fromisoformat(text))


def _from_wrapper(value: dict) -> int | float:
    inner = value["$date"]
    if isinstance(inner, dict):
        if "$numberLong" not in inner:
            raise ValueError(f"Unsupported $date payload: {inner!r}")
        return _from_numeric_string(str(inner["$numberLong"]))
    if isinstance(inner, str):
        try:
            return _from_numeric_string(inner)
        except ValueError:
            return _from_iso_string(inner)
    return normalize_date(inner)


def normalize_date(value) -> int | float:
    """Convert a stored completion date to epoch milliseconds."""
    # bool is an int subclass but never a timestamp
    if isinstance(value, bool):
        raise TypeError("Timestamp cannot be a boolean")
    if isinstance(value, (int, float)):
        return _number(value)
    if isinstance(value, str):
        return _from_numeric_string(value)
    if isinstance(value, datetime):
        return _from_datetime(value)
    if isinstance(value, date):
        return _from_datetime(datetime.combine(value, time(), tzinfo=timezone.utc))
    if isinstance(value, dict) and "$date" in value:
        return _from_wrapper(value)
    raise TypeError(f"Unsupported timestamp type: {type(value).__name__}")
