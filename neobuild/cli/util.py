"""Formatting utilities for the CLI.
"""


_UNITS = (("G", 1000000000), ("M", 1000000), ("k", 1000))


def format_number(n: float) -> str:
    """Format a size with a k, M or G unit, truncated to one decimal. Numbers below a
    thousand have no unit but keep the space, so that a unit like "o" can follow.
    """
    for unit, scale in _UNITS:
        if n >= scale:
            return f"{int(n) * 10 // scale / 10:.1f} {unit}"
    return f"{int(n)} "
