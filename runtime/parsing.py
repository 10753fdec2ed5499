"""Shared parsing helpers for simple runtime/config coercions."""


def parse_int_or_zero(value):
    """Parse user-entered integer text, returning 0 when it does not parse."""
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return 0
