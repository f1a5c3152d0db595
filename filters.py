"""Filter descriptors for searches.

A filter spec is written as a mapping from filter key to value, e.g.::

    {"type": FindType.FILE, "name//": r"\\.log$", "size>=": "2M"}

Each key may carry an operator suffix (see operators.py). parse_filters turns
such a mapping into an ordered list of the descriptor classes below.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntFlag
from typing import Any, Callable

from operators import DEFAULT_OPERATOR, compile_regex, evaluate, split_key
from sizes import parse_shorthand_size


class FindType(IntFlag):
    DIRECTORY = 1
    FILE = 2
    ALL = 255


@dataclass
class TypeFilter:
    """Pass entries whose kind (directory or file) is in the mask."""
    mask: int = FindType.FILE
    key = "type"

    def check(self, entry, record: dict) -> bool:
        wanted = FindType.DIRECTORY if entry.is_dir else FindType.FILE
        return bool(self.mask & wanted)


@dataclass
class NameFilter:
    value: Any
    operator: str = DEFAULT_OPERATOR
    key = "name"

    def __post_init__(self):
        if self.operator == "//" and not isinstance(self.value, re.Pattern):
            self.value = compile_regex(self.value)

    def check(self, entry, record: dict) -> bool:
        record[self.key] = entry.name
        return evaluate(entry.name, self.operator, self.value)


@dataclass
class TimeFilter:
    """Compare the modification time (Unix timestamp). Directories never pass."""
    value: Any
    operator: str = DEFAULT_OPERATOR
    key = "time"

    def __post_init__(self):
        if isinstance(self.value, datetime):
            self.value = int(self.value.timestamp())

    def check(self, entry, record: dict) -> bool:
        if entry.is_dir:
            return False
        record[self.key] = entry.mtime
        return evaluate(entry.mtime, self.operator, self.value)


@dataclass
class SizeFilter:
    """Compare the size in bytes against a shorthand size. Directories never pass."""
    value: Any
    operator: str = DEFAULT_OPERATOR
    limit: int = field(init=False)
    key = "size"

    def __post_init__(self):
        self.limit = parse_shorthand_size(self.value)

    def check(self, entry, record: dict) -> bool:
        if entry.is_dir:
            return False
        record[self.key] = entry.size
        return evaluate(entry.size, self.operator, self.limit)


@dataclass
class FuncFilter:
    """Call ``func(full_path, record)``; a falsy result rejects the entry."""
    func: Callable[[str, dict], Any]
    key = "func"

    def check(self, entry, record: dict) -> bool:
        result = self.func(entry.path, record)
        if not result:
            return False
        record[self.key] = result
        return True


Filter = TypeFilter | NameFilter | TimeFilter | SizeFilter | FuncFilter

_OPERATOR_FILTERS = {
    "name": NameFilter,
    "time": TimeFilter,
    "size": SizeFilter,
}


def _from_key(key: str, value) -> Filter:
    name, operator = split_key(key)
    if name == "type":
        if operator != DEFAULT_OPERATOR:
            raise ValueError(f"The type filter takes no operator: {key!r}")
        return TypeFilter(int(value))
    if name == "func":
        if not callable(value):
            raise ValueError("The func filter needs a callable")
        return FuncFilter(value)
    if name in _OPERATOR_FILTERS:
        try:
            return _OPERATOR_FILTERS[name](value, operator)
        except re.error as e:
            raise ValueError(f"Bad regular expression for {key!r}: {e}") from e
    raise ValueError(f"Unknown filter key: {key!r}")


def parse_filters(spec=None) -> list[Filter]:
    """Build the ordered filter list for a search.

    ``spec`` is a mapping (see module docstring), a sequence of filter
    descriptors, or None. A type filter for files only is appended when the
    spec has none.
    """
    if spec is None:
        filters = []
    elif isinstance(spec, dict):
        filters = [_from_key(key, value) for key, value in spec.items()]
    else:
        filters = list(spec)
    if not any(isinstance(f, TypeFilter) for f in filters):
        filters.append(TypeFilter(FindType.FILE))
    return filters
