"""
Usage record model and input boundary.

Defines the canonical usage record and the external daily-array format,
and converts raw JSON-like values into fully populated records.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping

from .formatting import round_half_up


class RecordShape(Enum):
    """Accepted input shapes."""
    CANONICAL = "canonical"  # totalCost / byModel / byDay
    EXTERNAL = "external"    # daily[] / totals{} as written by the usage exporter


@dataclass(frozen=True)
class ModelUsage:
    """Usage attributed to a single model."""
    cost: float = 0.0
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass(frozen=True)
class DayUsage:
    """Usage recorded on a single UTC day."""
    cost: float = 0.0
    tokens: int = 0


@dataclass(frozen=True)
class RawUsageRecord:
    """Immutable aggregate usage record.

    Totals are not required to reconcile with by_model or by_day; they may
    come from a different source granularity.
    """
    total_cost: float = 0.0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_cache_creation_tokens: int = 0
    total_cache_read_tokens: int = 0
    by_model: Dict[str, ModelUsage] = field(default_factory=dict)
    by_day: Dict[str, DayUsage] = field(default_factory=dict)
    is_estimated: bool = False  # by_model and token totals were scaled, not summed

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RawUsageRecord":
        """Build a record from the canonical JSON shape, defaulting absent fields to 0."""
        by_model = {}
        raw_models = data.get("byModel")
        if isinstance(raw_models, Mapping):
            for name, stats in raw_models.items():
                stats = stats if isinstance(stats, Mapping) else {}
                by_model[name] = ModelUsage(
                    cost=_as_float(stats.get("cost")),
                    input_tokens=_as_int(stats.get("inputTokens")),
                    output_tokens=_as_int(stats.get("outputTokens")),
                )

        by_day = {}
        raw_days = data.get("byDay")
        if isinstance(raw_days, Mapping):
            for day, stats in raw_days.items():
                stats = stats if isinstance(stats, Mapping) else {}
                by_day[day] = DayUsage(
                    cost=_as_float(stats.get("cost")),
                    tokens=_as_int(stats.get("tokens")),
                )

        return cls(
            total_cost=_as_float(data.get("totalCost")),
            total_input_tokens=_as_int(data.get("totalInputTokens")),
            total_output_tokens=_as_int(data.get("totalOutputTokens")),
            total_cache_creation_tokens=_as_int(
                data.get("totalCacheCreationInputTokens", data.get("totalCacheCreationTokens"))
            ),
            total_cache_read_tokens=_as_int(
                data.get("totalCacheReadInputTokens", data.get("totalCacheReadTokens"))
            ),
            by_model=by_model,
            by_day=by_day,
            is_estimated=data.get("isEstimated") is True,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the canonical JSON shape."""
        data: Dict[str, Any] = {
            "totalCost": self.total_cost,
            "totalInputTokens": self.total_input_tokens,
            "totalOutputTokens": self.total_output_tokens,
            "totalCacheCreationInputTokens": self.total_cache_creation_tokens,
            "totalCacheReadInputTokens": self.total_cache_read_tokens,
            "byModel": {
                name: {
                    "cost": usage.cost,
                    "inputTokens": usage.input_tokens,
                    "outputTokens": usage.output_tokens,
                }
                for name, usage in self.by_model.items()
            },
            "byDay": {
                day: {"cost": usage.cost, "tokens": usage.tokens}
                for day, usage in self.by_day.items()
            },
        }
        if self.is_estimated:
            data["isEstimated"] = True
        return data


@dataclass(frozen=True)
class ExternalModelBreakdown:
    """Per-model entry inside an external daily record."""
    model_name: str
    cost: float = 0.0
    input_tokens: int = 0
    output_tokens: int = 0


@dataclass(frozen=True)
class ExternalDay:
    """One entry of the external daily array."""
    date: str
    total_cost: float = 0.0
    total_tokens: int = 0
    model_breakdowns: List[ExternalModelBreakdown] = field(default_factory=list)


@dataclass(frozen=True)
class ExternalTotals:
    """Totals object of the external format."""
    total_cost: float = 0.0
    input_tokens: int = 0
    output_tokens: int = 0
    cache_creation_tokens: int = 0
    cache_read_tokens: int = 0


@dataclass(frozen=True)
class ExternalRecord:
    """Usage exporter output: a daily array plus a totals object."""
    daily: List[ExternalDay] = field(default_factory=list)
    totals: ExternalTotals = field(default_factory=ExternalTotals)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExternalRecord":
        """Build an external record, defaulting absent fields to 0."""
        daily = []
        raw_daily = data.get("daily")
        for entry in raw_daily if isinstance(raw_daily, list) else []:
            if not isinstance(entry, Mapping):
                continue
            breakdowns = []
            raw_breakdowns = entry.get("modelBreakdowns")
            for model in raw_breakdowns if isinstance(raw_breakdowns, list) else []:
                if not isinstance(model, Mapping):
                    continue
                breakdowns.append(ExternalModelBreakdown(
                    model_name=str(model.get("modelName") or "unknown"),
                    cost=_as_float(model.get("cost")),
                    input_tokens=_as_int(model.get("inputTokens")),
                    output_tokens=_as_int(model.get("outputTokens")),
                ))
            daily.append(ExternalDay(
                date=str(entry.get("date")),
                total_cost=_as_float(entry.get("totalCost")),
                total_tokens=_as_int(entry.get("totalTokens")),
                model_breakdowns=breakdowns,
            ))

        raw_totals = data.get("totals")
        raw_totals = raw_totals if isinstance(raw_totals, Mapping) else {}
        totals = ExternalTotals(
            total_cost=_as_float(raw_totals.get("totalCost")),
            input_tokens=_as_int(raw_totals.get("inputTokens")),
            output_tokens=_as_int(raw_totals.get("outputTokens")),
            cache_creation_tokens=_as_int(raw_totals.get("cacheCreationTokens")),
            cache_read_tokens=_as_int(raw_totals.get("cacheReadTokens")),
        )
        return cls(daily=daily, totals=totals)

    def to_canonical(self) -> RawUsageRecord:
        """Convert to the canonical record.

        Each daily entry becomes a by_day entry and its model breakdowns are
        summed into by_model. A date repeated in the array is summed too.
        """
        by_day: Dict[str, DayUsage] = {}
        by_model: Dict[str, ModelUsage] = {}

        for day in self.daily:
            previous = by_day.get(day.date, DayUsage())
            by_day[day.date] = DayUsage(
                cost=previous.cost + day.total_cost,
                tokens=previous.tokens + day.total_tokens,
            )
            for model in day.model_breakdowns:
                current = by_model.get(model.model_name, ModelUsage())
                by_model[model.model_name] = ModelUsage(
                    cost=current.cost + model.cost,
                    input_tokens=current.input_tokens + model.input_tokens,
                    output_tokens=current.output_tokens + model.output_tokens,
                )

        return RawUsageRecord(
            total_cost=self.totals.total_cost,
            total_input_tokens=self.totals.input_tokens,
            total_output_tokens=self.totals.output_tokens,
            total_cache_creation_tokens=self.totals.cache_creation_tokens,
            total_cache_read_tokens=self.totals.cache_read_tokens,
            by_model=by_model,
            by_day=by_day,
        )


def detect_shape(data: Mapping[str, Any]) -> RecordShape:
    """Decide which input shape a raw mapping uses.

    A daily list or a non-empty totals value marks the external format;
    anything else is read as canonical.
    """
    if isinstance(data.get("daily"), list) or data.get("totals"):
        return RecordShape.EXTERNAL
    return RecordShape.CANONICAL


def parse_usage_record(data: Mapping[str, Any]) -> RawUsageRecord:
    """Convert a raw mapping of either accepted shape into a canonical record.

    Args:
        data: Parsed JSON object

    Returns:
        Fully populated RawUsageRecord

    Raises:
        TypeError: If data is not a mapping
    """
    if isinstance(data, RawUsageRecord):
        return data
    if not isinstance(data, Mapping):
        raise TypeError(f"Usage data must be an object, got {type(data).__name__}")
    if detect_shape(data) == RecordShape.EXTERNAL:
        return ExternalRecord.from_dict(data).to_canonical()
    return RawUsageRecord.from_dict(data)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_float(value: Any) -> float:
    if not _is_number(value) or not math.isfinite(value):
        return 0.0
    return float(value)


def _as_int(value: Any) -> int:
    if not _is_number(value) or not math.isfinite(value):
        return 0
    if isinstance(value, int):
        return value
    return round_half_up(value)
