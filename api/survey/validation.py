"""
Submission validation.

Browser clients send loosely typed JSON, so presence follows JavaScript
truthiness (None, False, "", 0 and NaN are missing) and the two score fields
are coerced like `Number()` before the range check. Every field is checked;
the failure lists all offenders in column order.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from .schemas import FIELD_ORDER, SCORE_FIELDS, ResponseRecord

SCORE_MIN = 1
SCORE_MAX = 5


@dataclass(frozen=True)
class ValidationResult:
    record: ResponseRecord | None = None
    fields: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.record is not None


def is_truthy(value: Any) -> bool:
    if value is None or value is False:
        return False
    if isinstance(value, int):
        return value != 0
    if isinstance(value, float):
        return value != 0 and not math.isnan(value)
    if isinstance(value, str):
        return value != ""
    return True


def _int_to_float(value: int) -> float:
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def to_number(value: Any) -> float:
    """
    Numeric coercion matching JavaScript's `Number()` for JSON inputs.
    """
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, int):
        return _int_to_float(value)
    if isinstance(value, float):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        if "_" in text:
            return math.nan
        lowered = text.lower()
        for prefix, base in (("0x", 16), ("0o", 8), ("0b", 2)):
            if lowered.startswith(prefix):
                try:
                    return _int_to_float(int(text[2:], base))
                except ValueError:
                    return math.nan
        if lowered in ("infinity", "+infinity"):
            return math.inf
        if lowered == "-infinity":
            return -math.inf
        if lowered.lstrip("+-") in ("inf", "nan"):
            return math.nan
        try:
            return float(text)
        except ValueError:
            return math.nan
    if isinstance(value, list):
        if not value:
            return 0.0
        if len(value) == 1:
            return to_number(value[0])
    return math.nan


def _score(value: Any) -> int | None:
    number = to_number(value)
    if not math.isfinite(number) or not number.is_integer():
        return None
    if number < SCORE_MIN or number > SCORE_MAX:
        return None
    return int(number)


def _text(value: Any) -> str | None:
    if not is_truthy(value):
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    # Lists and objects have no column representation.
    return None


def validate_submission(payload: Any) -> ValidationResult:
    data = payload if isinstance(payload, dict) else {}

    values: dict[str, Any] = {}
    invalid: list[str] = []
    for name in FIELD_ORDER:
        raw = data.get(name)
        value = _score(raw) if name in SCORE_FIELDS else _text(raw)
        if value is None:
            invalid.append(name)
        else:
            values[name] = value

    if invalid:
        return ValidationResult(fields=invalid)
    return ValidationResult(record=ResponseRecord(**values))
