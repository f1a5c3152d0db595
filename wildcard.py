"""Compile shell-style wildcard patterns ('*.txt', 'img_??.png') to regexes."""

import re


def compile_glob(pattern: str) -> re.Pattern:
    """Turn a wildcard pattern into an anchored, case-insensitive regex.

    '*' matches any run of characters, '?' exactly one character. Everything
    else matches literally.
    """
    parts = []
    for char in pattern:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("^" + "".join(parts) + r"\Z", re.IGNORECASE | re.DOTALL)
