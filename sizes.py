"""Shorthand byte-size notation ("2M", "512k", "1.5g")."""

import re

_SHORTHAND_RE = re.compile(r"^\s*(\d+(?:\.\d*)?|\.\d+)?\s*([kmgtpe])?\s*$", re.IGNORECASE)

# Each unit is 1024 times the previous one.
UNITS = {unit: 1 << (10 * power) for power, unit in enumerate("kmgtpe", start=1)}


def parse_shorthand_size(text) -> int:
    """Return the size in bytes for a shorthand notation (e.g. '1k' -> 1024).

    Integers are taken as a byte count already. Anything that does not parse
    yields 0.
    """
    if isinstance(text, bool):
        return 0
    if isinstance(text, int):
        return text
    match = _SHORTHAND_RE.match(str(text))
    if not match or not match.group(1):
        return 0
    factor = UNITS[match.group(2).lower()] if match.group(2) else 1
    return int(float(match.group(1)) * factor)
