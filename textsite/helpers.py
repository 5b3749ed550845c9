"""Template helper functions.

The helper set is fixed: each helper takes its template arguments and returns
a string. HELPERS is installed into the Jinja2 environment once, both as
globals (``{{ eq(a, b) }}``) and as filters (``{{ title | lowercase }}``).
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime
from typing import Any


def _operand(value: Any) -> str:
    # Strings and integers compare by their text; anything else counts as empty.
    if isinstance(value, bool):
        return ""
    if isinstance(value, (str, int)):
        return str(value)
    return ""


def eq(a: Any, b: Any) -> str:
    """Return "true" when both operands have the same string form."""
    return "true" if _operand(a) == _operand(b) else "false"


def neq(a: Any, b: Any) -> str:
    """Return "true" when the operands differ in string form."""
    return "true" if _operand(a) != _operand(b) else "false"


def lowercase(value: Any) -> str:
    if isinstance(value, str):
        return value.lower()
    return ""


def parse_iso_date(value: str) -> date | None:
    """Parse a strict YYYY-MM-DD calendar date.

    Returns:
        The date, or None when the string is not an ISO calendar date.
    """
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def _parse_timestamp(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def format_date(value: Any) -> str:
    """Format an ISO date or timestamp as "Month D, YYYY".

    Examples:
        >>> format_date("2024-03-05")
        'March 5, 2024'

        >>> format_date("next tuesday")
        'next tuesday'
    """
    if not isinstance(value, str):
        return ""
    parsed: date | datetime | None = parse_iso_date(value) or _parse_timestamp(value)
    if parsed is None:
        return value
    return f"{parsed:%B} {parsed.day}, {parsed.year}"


HELPERS: dict[str, Callable[..., str]] = {
    "eq": eq,
    "neq": neq,
    "lowercase": lowercase,
    "date": format_date,
}
