"""
Usage aggregation and summary derivation.

Merges usage records from several sources and derives the summary,
model breakdown and daily series consumed by the renderers.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence, Union

from .formatting import calculate_percentage, round_half_up, shorten_model_name
from .period import Period, filter_by_period
from .records import DayUsage, ModelUsage, RawUsageRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyAverage:
    """Average usage per day of data."""
    tokens: int
    cost: float


@dataclass(frozen=True)
class Summary:
    """Headline figures for a usage record."""
    total_tokens: int
    total_input_tokens: int
    total_output_tokens: int
    total_cache_creation: int
    total_cache_read: int
    total_cost: float
    daily_average: DailyAverage
    period_days: int


@dataclass(frozen=True)
class ModelBreakdown:
    """One row of the per-model breakdown."""
    name: str
    short_name: str
    cost: float
    input_tokens: int
    output_tokens: int
    percentage: int  # share of total cost, 0-100


@dataclass(frozen=True)
class DailyUsage:
    """One day of the daily series."""
    date: str
    tokens: int
    cost: float


@dataclass(frozen=True)
class ProcessedResult:
    """Read-only snapshot handed to the renderers."""
    summary: Summary
    models: List[ModelBreakdown]
    daily_usage: List[DailyUsage]
    raw: RawUsageRecord
    period: Period
    source_count: Optional[int] = None

    @property
    def is_estimated(self) -> bool:
        """Whether model and token figures were scaled rather than summed."""
        return self.raw.is_estimated


def merge_usage_data(records: Sequence[RawUsageRecord]) -> RawUsageRecord:
    """Merge usage records from several sources into one.

    Sources are assumed to be different machines with non-overlapping
    activity, so a date or model present in several sources is summed,
    not deduplicated.

    Args:
        records: Records to merge, in source order

    Returns:
        A zero record for no input, the input itself for one record,
        otherwise a new record holding the elementwise sums
    """
    if not records:
        return RawUsageRecord()

    if len(records) == 1:
        return records[0]

    by_model: Dict[str, ModelUsage] = {}
    by_day: Dict[str, DayUsage] = {}

    for record in records:
        for name, usage in record.by_model.items():
            current = by_model.get(name, ModelUsage())
            by_model[name] = ModelUsage(
                cost=current.cost + usage.cost,
                input_tokens=current.input_tokens + usage.input_tokens,
                output_tokens=current.output_tokens + usage.output_tokens,
            )
        for day, usage in record.by_day.items():
            current = by_day.get(day, DayUsage())
            by_day[day] = DayUsage(
                cost=current.cost + usage.cost,
                tokens=current.tokens + usage.tokens,
            )

    logger.debug(
        "Merged %d sources: %d models, %d days",
        len(records), len(by_model), len(by_day),
    )

    return RawUsageRecord(
        total_cost=sum(record.total_cost for record in records),
        total_input_tokens=sum(record.total_input_tokens for record in records),
        total_output_tokens=sum(record.total_output_tokens for record in records),
        total_cache_creation_tokens=sum(record.total_cache_creation_tokens for record in records),
        total_cache_read_tokens=sum(record.total_cache_read_tokens for record in records),
        by_model=by_model,
        by_day=by_day,
        is_estimated=any(record.is_estimated for record in records),
    )


def calculate_summary(record: RawUsageRecord) -> Summary:
    """Compute headline totals and the daily average.

    Days are counted from by_day with a floor of 1, so a record without
    daily data averages over a single day.
    """
    total_tokens = (
        record.total_input_tokens
        + record.total_output_tokens
        + record.total_cache_creation_tokens
        + record.total_cache_read_tokens
    )
    period_days = len(record.by_day) or 1

    return Summary(
        total_tokens=total_tokens,
        total_input_tokens=record.total_input_tokens,
        total_output_tokens=record.total_output_tokens,
        total_cache_creation=record.total_cache_creation_tokens,
        total_cache_read=record.total_cache_read_tokens,
        total_cost=record.total_cost,
        daily_average=DailyAverage(
            tokens=round_half_up(total_tokens / period_days),
            cost=record.total_cost / period_days,
        ),
        period_days=period_days,
    )


def get_model_breakdown(record: RawUsageRecord) -> List[ModelBreakdown]:
    """Per-model rows with cost share, most expensive first.

    Ties keep the record's model order.
    """
    models = [
        ModelBreakdown(
            name=name,
            short_name=shorten_model_name(name),
            cost=usage.cost,
            input_tokens=usage.input_tokens,
            output_tokens=usage.output_tokens,
            percentage=max(0, min(100, calculate_percentage(usage.cost, record.total_cost))),
        )
        for name, usage in record.by_model.items()
    ]
    return sorted(models, key=lambda model: model.cost, reverse=True)


def get_daily_usage(record: RawUsageRecord, days: Optional[int] = None) -> List[DailyUsage]:
    """Daily series, most recent first, optionally limited to the last `days` days."""
    daily_usage = [
        DailyUsage(date=day, tokens=usage.tokens, cost=usage.cost)
        for day, usage in record.by_day.items()
    ]
    daily_usage.sort(key=lambda entry: entry.date, reverse=True)

    if days and days > 0:
        daily_usage = daily_usage[:days]

    return daily_usage


def get_top_model(models: Optional[Sequence[ModelBreakdown]]) -> Optional[ModelBreakdown]:
    """The most expensive model, or None when there are no models."""
    if not models:
        return None
    return models[0]


def process_data(
    record: RawUsageRecord,
    period: Union[Period, str] = Period.ALL,
    reference_date: Optional[Union[date, datetime]] = None,
    source_count: Optional[int] = None,
) -> ProcessedResult:
    """Filter a record to a period and derive everything the renderers need."""
    period = Period.parse(period)
    filtered = filter_by_period(record, period, reference_date)

    return ProcessedResult(
        summary=calculate_summary(filtered),
        models=get_model_breakdown(filtered),
        daily_usage=get_daily_usage(filtered),
        raw=filtered,
        period=period,
        source_count=source_count,
    )
