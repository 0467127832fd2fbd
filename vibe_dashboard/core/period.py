"""
Period windows and period filtering.

Restricts a usage record to a relative UTC day window. Day-level data is
re-summed exactly; model-level data and token totals are estimated by
scaling, since the record carries no per-day model attribution.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum
from typing import Optional, Union

from .formatting import round_half_up
from .records import DayUsage, ModelUsage, RawUsageRecord

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]


class Period(Enum):
    """Named relative time windows."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"

    @classmethod
    def parse(cls, value: Union["Period", str, None]) -> "Period":
        """Resolve a period tag; unrecognized tags fall back to ALL."""
        if isinstance(value, Period):
            return value
        if value is None:
            return cls.ALL
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = [period.value for period in cls]
            logger.warning("Unknown period %r, using 'all' (valid: %s)", value, valid)
            return cls.ALL


# Days covered by each bounded window, counting today
_PERIOD_DAYS = {
    Period.DAY: 1,
    Period.WEEK: 7,
    Period.MONTH: 30,
}

_PERIOD_LABEL_KEYS = {
    Period.DAY: "today",
    Period.WEEK: "thisWeek",
    Period.MONTH: "thisMonth",
    Period.ALL: "allTime",
}


@dataclass(frozen=True)
class PeriodRange:
    """Inclusive UTC range; start_date is None for an unbounded window."""
    start_date: Optional[datetime]
    end_date: datetime
    days: Optional[int]


def _as_utc_datetime(value: Optional[DateLike]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def get_period_range(
    period: Union[Period, str],
    reference_date: Optional[DateLike] = None,
) -> PeriodRange:
    """Compute the date range for a period relative to a reference date.

    Args:
        period: Period tag; unrecognized tags are treated as 'all'
        reference_date: Day the window ends on (default: now, UTC)

    Returns:
        PeriodRange spanning [start 00:00:00.000, end 23:59:59.999] UTC
    """
    period = Period.parse(period)
    reference = _as_utc_datetime(reference_date)
    end_date = datetime.combine(reference.date(), time(23, 59, 59, 999000), tzinfo=timezone.utc)

    days = _PERIOD_DAYS.get(period)
    if days is None:
        return PeriodRange(start_date=None, end_date=end_date, days=None)

    start_day = reference.date() - timedelta(days=days - 1)
    start_date = datetime.combine(start_day, time.min, tzinfo=timezone.utc)
    return PeriodRange(start_date=start_date, end_date=end_date, days=days)


def is_date_in_range(value: Union[str, DateLike], period_range: PeriodRange) -> bool:
    """Check whether a day falls inside a period range.

    Strings are read as ISO dates at UTC midnight; unparseable strings are
    never in a bounded range.
    """
    if period_range.start_date is None:
        return True

    if isinstance(value, str):
        value = _parse_day_key(value)
        if value is None:
            return False

    moment = _as_utc_datetime(value)
    return period_range.start_date <= moment <= period_range.end_date


def _parse_day_key(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def get_period_label_key(period: Union[Period, str, None]) -> str:
    """Translation key for a period label; unknown periods get 'allTime'."""
    if not isinstance(period, Period):
        try:
            period = Period(period)
        except ValueError:
            return "allTime"
    return _PERIOD_LABEL_KEYS[period]


def filter_by_period(
    record: RawUsageRecord,
    period: Union[Period, str],
    reference_date: Optional[DateLike] = None,
) -> RawUsageRecord:
    """Restrict a record to a period window.

    The filtered total cost is the exact sum of the included days. Token
    totals and per-model figures are the original values scaled by
    filtered_cost / original_cost, so the result is flagged as estimated.

    Args:
        record: Record to filter
        period: Period tag ('all' returns the record itself)
        reference_date: Day the window ends on (default: now, UTC)

    Returns:
        Filtered RawUsageRecord
    """
    period = Period.parse(period)
    if period == Period.ALL:
        return record

    period_range = get_period_range(period, reference_date)

    by_day = {}
    skipped = []
    filtered_cost = 0.0
    for day, usage in record.by_day.items():
        if isinstance(day, str) and _parse_day_key(day) is None:
            skipped.append(day)
            continue
        if is_date_in_range(day, period_range):
            by_day[day] = DayUsage(cost=usage.cost, tokens=usage.tokens)
            filtered_cost += usage.cost

    if skipped:
        logger.warning("Skipped %d unparseable date key(s): %s", len(skipped), skipped)

    ratio = filtered_cost / record.total_cost if record.total_cost else 0.0

    by_model = {
        name: ModelUsage(
            cost=usage.cost * ratio,
            input_tokens=round_half_up(usage.input_tokens * ratio),
            output_tokens=round_half_up(usage.output_tokens * ratio),
        )
        for name, usage in record.by_model.items()
    }

    logger.debug(
        "Filtered to %s: %d of %d days, cost ratio %.4f",
        period.value, len(by_day), len(record.by_day), ratio,
    )

    return RawUsageRecord(
        total_cost=filtered_cost,
        total_input_tokens=round_half_up(record.total_input_tokens * ratio),
        total_output_tokens=round_half_up(record.total_output_tokens * ratio),
        total_cache_creation_tokens=round_half_up(record.total_cache_creation_tokens * ratio),
        total_cache_read_tokens=round_half_up(record.total_cache_read_tokens * ratio),
        by_model=by_model,
        by_day=by_day,
        is_estimated=True,
    )
