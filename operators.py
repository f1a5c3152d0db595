"""Comparison operators used by search filters.

Besides the usual '==', '!=', '>', '>=', '<', '<=' and '%' operators there
are some string specific ones:

    '*-'  reference starts with the value
    '-*'  reference ends with the value
    '*'   reference contains the value
    '//'  reference matches the regular expression in the value
"""

import operator as op
import re

DEFAULT_OPERATOR = "=="

_KEY_RE = re.compile(r"^(\w+)(\W+)$")
_NUMBER_RE = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?\s*$")
_REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}

_ORDERED = {
    ">": op.gt,
    ">=": op.ge,
    "<": op.lt,
    "<=": op.le,
}


def split_key(key: str) -> tuple[str, str]:
    """Split a filter key like 'size>=' into ('size', '>='). No suffix means '=='."""
    match = _KEY_RE.match(key)
    if match:
        return match.group(1), match.group(2)
    return key, DEFAULT_OPERATOR


def _as_number(value):
    """Return value as int/float when it is numeric (or a numeric string), else None."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str) and _NUMBER_RE.match(value):
        number = float(value)
        return int(number) if number.is_integer() else number
    return None


def _loose_pair(ref, value):
    """Coerce both sides to numbers when both are numeric, else to strings on type mismatch."""
    ref_number, value_number = _as_number(ref), _as_number(value)
    if ref_number is not None and value_number is not None:
        return ref_number, value_number
    if type(ref) is not type(value):
        return str(ref), str(value)
    return ref, value


def compile_regex(value) -> re.Pattern:
    """Compile a regex value, accepting '/pattern/flags' delimiter-wrapped form."""
    if isinstance(value, re.Pattern):
        return value
    value = str(value)
    end = value.rfind("/")
    if value.startswith("/") and end > 0:
        flags = 0
        for char in value[end + 1:]:
            flags |= _REGEX_FLAGS.get(char, 0)
        return re.compile(value[1:end], flags)
    return re.compile(value)


def evaluate(ref, operator: str, value, default: bool = False) -> bool:
    """Evaluate an operator between a reference value and a value.

    Args:
        ref: The value to look at (e.g. an entry name or size).
        operator: Operator token.
        value: Value sought after in the reference.
        default: Result for an unknown operator.
    """
    if operator == "==":
        ref, value = _loose_pair(ref, value)
        return ref == value
    if operator == "!=":
        ref, value = _loose_pair(ref, value)
        return ref != value
    if operator in _ORDERED:
        ref, value = _loose_pair(ref, value)
        return _ORDERED[operator](ref, value)
    if operator == "%":
        ref_number, value_number = _as_number(ref), _as_number(value)
        if ref_number is None or not value_number:
            return False
        return bool(ref_number % value_number)
    if operator == "*-":
        return str(ref).startswith(str(value))
    if operator == "-*":
        return str(ref).endswith(str(value))
    if operator == "*":
        return str(value) in str(ref)
    if operator == "//":
        return compile_regex(value).search(str(ref)) is not None
    return default
