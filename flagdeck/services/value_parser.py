"""
Typed value parsing for configs and feature flags.

Values are stored as text and interpreted on the way out. Parsing is lenient:
a value that does not fit its declared type is returned unchanged.
"""
import math
import re
from typing import Union

ParsedValue = Union[str, int, float, bool]

# ASCII digits only
_DECIMAL = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")
_PREFIXED = re.compile(r"0([xXoObB])([0-9a-fA-F]+)")
_BASES = {"x": 16, "o": 8, "b": 2}

# Largest integer a JSON consumer can hold exactly
_MAX_SAFE_INTEGER = 2 ** 53


def _to_number(raw: str):
    """Numeric coercion of the whole string, or None when it is not a number"""
    text = raw.strip()
    if text == "":
        return 0

    if _DECIMAL.fullmatch(text):
        number = float(text)
    else:
        m = _PREFIXED.fullmatch(text)
        if not m:
            return None
        try:
            number = float(int(m.group(2), _BASES[m.group(1).lower()]))
        except ValueError:
            return None

    if math.isnan(number) or math.isinf(number):
        return None
    if number.is_integer() and abs(number) <= _MAX_SAFE_INTEGER:
        return int(number)
    return number


def parse_value(raw: str, value_type: str) -> ParsedValue:
    """Convert a stored string to its declared scalar type"""
    if value_type == "number":
        number = _to_number(raw)
        return raw if number is None else number

    if value_type == "boolean":
        lowered = raw.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        return raw

    return raw
