"""
Composer Kernel: Script Value Semantics

Python representations of the values authored component code works with,
plus the coercion rules the interpreter needs (truthiness, string and number
conversion, equality, typeof).

  undefined        → UNDEFINED singleton
  null             → None
  boolean          → bool
  number           → int (integral) / float
  string           → str
  array            → list
  object           → dict
  function         → JSFunction (interpreter) or any Python callable
"""

from __future__ import annotations

import math
from typing import Any


class JSUndefined:
    """The `undefined` value. A singleton, falsy."""

    _instance: JSUndefined | None = None

    def __new__(cls) -> JSUndefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "undefined"


UNDEFINED = JSUndefined()

_MAX_SAFE_INTEGER = 2**53


def is_nullish(value: Any) -> bool:
    return value is None or value is UNDEFINED


def is_number(value: Any) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def normalize_number(value: float | int) -> float | int:
    """Collapse integral floats to int so they print the way scripts expect."""
    if isinstance(value, float) and value.is_integer() and abs(value) < _MAX_SAFE_INTEGER:
        return int(value)
    return value


def truthy(value: Any) -> bool:
    if value is None or value is UNDEFINED or value is False:
        return False
    if value is True:
        return True
    if is_number(value):
        return not (value == 0 or (isinstance(value, float) and math.isnan(value)))
    if isinstance(value, str):
        return value != ""
    # arrays, objects and functions are always truthy, even when empty
    return True


def format_number(value: float | int) -> str:
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return str(value)


def to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if value is UNDEFINED:
        return "undefined"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if is_number(value):
        return format_number(value)
    if isinstance(value, list):
        return ",".join("" if is_nullish(item) else to_string(item) for item in value)
    if isinstance(value, dict):
        return "[object Object]"
    js_string = getattr(value, "js_string", None)
    if js_string is not None:
        return js_string()
    if callable(value):
        return "function"
    return str(value)


def to_number(value: Any) -> float | int:
    if is_number(value):
        return value
    if value is None or value is False:
        return 0
    if value is True:
        return 1
    if value is UNDEFINED:
        return math.nan
    if isinstance(value, str):
        text = value.strip()
        if text == "":
            return 0
        lowered = text.lower()
        try:
            if lowered.startswith(("0x", "0o", "0b")):
                return int(text, 0)
            if lowered in ("infinity", "+infinity"):
                return math.inf
            if lowered == "-infinity":
                return -math.inf
            if lowered in ("nan", "inf", "-inf", "+inf"):
                return math.nan
            return normalize_number(float(text))
        except ValueError:
            return math.nan
    if isinstance(value, list):
        if not value:
            return 0
        if len(value) == 1:
            return to_number(value[0])
    return math.nan


def type_of(value: Any) -> str:
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "object"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if callable(value) and not isinstance(value, dict | list):
        return "function"
    return "object"


def strict_equals(a: Any, b: Any) -> bool:
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a is b
    if is_number(a) and is_number(b):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    return a is b


def loose_equals(a: Any, b: Any) -> bool:
    if is_nullish(a) and is_nullish(b):
        return True
    if is_nullish(a) or is_nullish(b):
        return False
    if isinstance(a, bool):
        a = to_number(a)
    if isinstance(b, bool):
        b = to_number(b)
    if is_number(a) and isinstance(b, str):
        return a == to_number(b)
    if isinstance(a, str) and is_number(b):
        return to_number(a) == b
    if isinstance(a, list | dict) and isinstance(b, str | int | float):
        return to_string(a) == to_string(b)
    return strict_equals(a, b)


def to_property_key(value: Any) -> str | int:
    """Normalize a computed member key. Integral numbers stay int (array indexes)."""
    if is_number(value):
        number = normalize_number(value)
        if isinstance(number, int):
            return number
        return format_number(number)
    if isinstance(value, str):
        return value
    return to_string(value)
