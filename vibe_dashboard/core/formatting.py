"""
Formatting primitives for dashboard output.

Number, currency, date and text helpers shared by the aggregator and renderers.
All functions are pure.
"""

import math
import re
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union
from xml.sax.saxutils import escape

Number = Union[int, float]

_TOKEN_SUFFIXES = (
    (1_000_000_000, "B"),
    (1_000_000, "M"),
    (1_000, "K"),
)

_CLAUDE_MODEL_RE = re.compile(r"claude-(\w+)-(\d+)(?:-(\d+))?-\d{8}", re.IGNORECASE)

_XML_ENTITIES = {'"': "&quot;", "'": "&#39;"}


def _is_missing(value: Optional[Number]) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def round_half_up(value: Number, decimals: int = 0) -> Number:
    """Round half away from zero for positives, as display rounding expects.

    Python's round() uses banker's rounding, which would turn 2.5 into 2.

    Args:
        value: Number to round
        decimals: Decimal places to keep

    Returns:
        int when decimals is 0, float otherwise
    """
    quantum = Decimal(1).scaleb(-decimals)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    if decimals == 0:
        return int(rounded)
    return float(rounded)


def format_tokens(num: Optional[Number]) -> str:
    """Format large numbers with K/M/B suffixes (e.g. 125300000 -> "125.3M")."""
    if _is_missing(num):
        return "0"

    abs_num = abs(num)
    sign = "-" if num < 0 else ""

    for threshold, suffix in _TOKEN_SUFFIXES:
        if abs_num >= threshold:
            scaled = f"{abs_num / threshold:.1f}"
            if scaled.endswith(".0"):
                scaled = scaled[:-2]
            return f"{sign}{scaled}{suffix}"

    if float(abs_num).is_integer():
        return f"{sign}{int(abs_num)}"
    return f"{sign}{abs_num}"


def format_cost(num: Optional[Number], symbol: str = "$") -> str:
    """Format a cost with a currency symbol and two decimals."""
    if _is_missing(num):
        return f"{symbol}0.00"
    return f"{symbol}{num:.2f}"


def format_date(value: Union[str, date]) -> str:
    """Format an ISO date string or date as MM/DD; unparseable strings pass through."""
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value[:10])
        except ValueError:
            return value
    return f"{value.month:02d}/{value.day:02d}"


def format_datetime(value: Optional[datetime] = None) -> str:
    """Format a timestamp as "YYYY-MM-DD HH:MM UTC"."""
    if value is None:
        value = datetime.now(timezone.utc)
    elif value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%d %H:%M UTC")


def calculate_percentage(value: Number, total: Number, decimals: int = 0) -> Number:
    """Percentage of value in total; 0 when total is 0."""
    if total == 0:
        return 0
    return round_half_up((value / total) * 100, decimals)


def generate_progress_bar(
    percentage: Number,
    length: int = 20,
    filled: str = "█",
    empty: str = "░",
) -> str:
    """Generate a text progress bar for a 0-100 percentage."""
    clamped = max(0, min(100, percentage))
    filled_length = round_half_up((clamped / 100) * length)
    return filled * filled_length + empty * (length - filled_length)


def generate_bar(value: Number, max_value: Number, length: int = 20) -> str:
    """Generate a bar scaled against the largest value in a series."""
    if max_value == 0:
        return "░" * length
    return generate_progress_bar((value / max_value) * 100, length)


def escape_xml(value) -> str:
    """Escape text for SVG content and attributes."""
    if not isinstance(value, str):
        return str(value)
    return escape(value, _XML_ENTITIES)


def shorten_model_name(model_name: Optional[str]) -> str:
    """Shorten a model identifier for display.

    "claude-opus-4-5-20250514" becomes "opus-4.5"; names outside the
    dated Claude scheme keep their last two dash-separated parts.
    """
    if not model_name:
        return "unknown"

    match = _CLAUDE_MODEL_RE.search(model_name)
    if match:
        kind, major, minor = match.groups()
        return f"{kind}-{major}.{minor}" if minor else f"{kind}-{major}"

    return "-".join(model_name.split("-")[-2:])
