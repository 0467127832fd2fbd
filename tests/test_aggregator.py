"""
Unit tests for aggregation and summary derivation.

Tests source merging, summaries, model breakdowns and the daily series.
"""

from datetime import date

import pytest

from vibe_dashboard.core.aggregator import (
    calculate_summary,
    get_daily_usage,
    get_model_breakdown,
    get_top_model,
    merge_usage_data,
    process_data,
)
from vibe_dashboard.core.period import Period
from vibe_dashboard.core.records import DayUsage, ModelUsage, RawUsageRecord


SONNET = "claude-sonnet-4-20250514"
OPUS = "claude-opus-4-20250514"

SAMPLE = RawUsageRecord(
    total_cost=847.23,
    total_input_tokens=45_000_000,
    total_output_tokens=12_000_000,
    total_cache_creation_tokens=5_000_000,
    total_cache_read_tokens=63_000_000,
    by_model={
        SONNET: ModelUsage(cost=520.15, input_tokens=30_000_000, output_tokens=8_000_000),
        OPUS: ModelUsage(cost=327.08, input_tokens=15_000_000, output_tokens=4_000_000),
    },
    by_day={
        "2025-01-12": DayUsage(cost=52.87, tokens=2_900_000),
        "2025-01-14": DayUsage(cost=45.23, tokens=2_500_000),
        "2025-01-13": DayUsage(cost=38.12, tokens=2_100_000),
    },
)


def make_source(total_cost, input_tokens, output_tokens, cache_creation, by_model, by_day):
    """Create a source record from plain tuples."""
    return RawUsageRecord(
        total_cost=total_cost,
        total_input_tokens=input_tokens,
        total_output_tokens=output_tokens,
        total_cache_creation_tokens=cache_creation,
        by_model={name: ModelUsage(*values) for name, values in by_model.items()},
        by_day={day: DayUsage(*values) for day, values in by_day.items()},
    )


SOURCE_1 = make_source(
    100, 1_000_000, 500_000, 0,
    {SONNET: (100, 1_000_000, 500_000)},
    {"2025-01-14": (50, 750_000), "2025-01-13": (50, 750_000)},
)
SOURCE_2 = make_source(
    200, 2_000_000, 1_000_000, 100_000,
    {SONNET: (150, 1_500_000, 750_000), OPUS: (50, 500_000, 250_000)},
    {"2025-01-14": (100, 1_500_000), "2025-01-12": (100, 1_600_000)},
)
SOURCE_3 = make_source(
    25, 10, 20, 30,
    {OPUS: (25, 10, 20)},
    {"2025-01-12": (25, 30)},
)


class TestMerge:
    """Test merging of usage sources."""

    def test_merge_totals(self):
        """Verify scalar totals are summed."""
        merged = merge_usage_data([SOURCE_1, SOURCE_2])

        assert merged.total_cost == 300
        assert merged.total_input_tokens == 3_000_000
        assert merged.total_output_tokens == 1_500_000
        assert merged.total_cache_creation_tokens == 100_000
        assert merged.total_cache_read_tokens == 0

    def test_merge_by_model(self):
        """Verify model keys are unioned and summed."""
        merged = merge_usage_data([SOURCE_1, SOURCE_2])

        assert merged.by_model[SONNET] == ModelUsage(cost=250, input_tokens=2_500_000, output_tokens=1_250_000)
        assert merged.by_model[OPUS] == ModelUsage(cost=50, input_tokens=500_000, output_tokens=250_000)

    def test_merge_by_day(self):
        """Verify a date present in both sources is added, not deduplicated."""
        merged = merge_usage_data([SOURCE_1, SOURCE_2])

        assert merged.by_day["2025-01-14"] == DayUsage(cost=150, tokens=2_250_000)
        assert merged.by_day["2025-01-13"].cost == 50
        assert merged.by_day["2025-01-12"].cost == 100

    def test_single_source_is_returned_as_is(self):
        assert merge_usage_data([SOURCE_1]) is SOURCE_1

    def test_empty_input_gives_zero_record(self):
        merged = merge_usage_data([])

        assert merged.total_cost == 0
        assert merged.total_input_tokens == 0
        assert merged.by_model == {}
        assert merged.by_day == {}

    def test_merge_is_order_independent(self):
        """Verify merging commutes and associates."""
        forward = merge_usage_data([SOURCE_1, SOURCE_2, SOURCE_3])
        backward = merge_usage_data([SOURCE_3, SOURCE_2, SOURCE_1])
        nested = merge_usage_data([merge_usage_data([SOURCE_1, SOURCE_2]), SOURCE_3])

        for other in (backward, nested):
            assert other.total_cost == forward.total_cost
            assert other.total_input_tokens == forward.total_input_tokens
            assert other.total_cache_creation_tokens == forward.total_cache_creation_tokens
            assert other.by_model == forward.by_model
            assert other.by_day == forward.by_day

    def test_estimated_flag_propagates(self):
        estimated = RawUsageRecord(total_cost=1.0, is_estimated=True)
        assert merge_usage_data([SOURCE_1, estimated]).is_estimated is True
        assert merge_usage_data([SOURCE_1, SOURCE_2]).is_estimated is False


class TestSummary:
    """Test summary statistics."""

    def test_total_tokens(self):
        assert calculate_summary(SAMPLE).total_tokens == 125_000_000

    def test_total_cost(self):
        assert calculate_summary(SAMPLE).total_cost == 847.23

    def test_daily_average(self):
        summary = calculate_summary(SAMPLE)

        assert summary.period_days == 3
        assert summary.daily_average.tokens == 41_666_667
        assert summary.daily_average.cost == pytest.approx(847.23 / 3)

    def test_empty_record(self):
        """Verify the day count floors at 1."""
        summary = calculate_summary(RawUsageRecord.from_dict({}))

        assert summary.total_tokens == 0
        assert summary.total_cost == 0
        assert summary.period_days == 1
        assert summary.daily_average.tokens == 0


class TestModelBreakdown:
    """Test the per-model breakdown."""

    def test_sorted_by_cost(self):
        models = get_model_breakdown(SAMPLE)

        assert [model.name for model in models] == [SONNET, OPUS]
        assert models[0].cost == 520.15

    def test_short_names(self):
        models = get_model_breakdown(SAMPLE)

        assert models[0].short_name == "sonnet-4"
        assert models[1].short_name == "opus-4"

    def test_percentages(self):
        models = get_model_breakdown(SAMPLE)

        assert models[0].percentage == 61
        assert models[1].percentage == 39

    def test_zero_total_cost(self):
        record = RawUsageRecord(by_model={"a": ModelUsage(cost=5.0)})
        assert get_model_breakdown(record)[0].percentage == 0

    def test_percentages_bounded(self):
        """Verify unreconciled totals cannot push a share past 100."""
        record = RawUsageRecord(
            total_cost=10.0,
            by_model={"a": ModelUsage(cost=30.0), "b": ModelUsage(cost=-5.0)},
        )
        percentages = {model.name: model.percentage for model in get_model_breakdown(record)}
        assert percentages == {"a": 100, "b": 0}

    def test_percentage_sum_within_rounding(self):
        record = RawUsageRecord(
            total_cost=3.0,
            by_model={"a": ModelUsage(cost=1.0), "b": ModelUsage(cost=1.0), "c": ModelUsage(cost=1.0)},
        )
        models = get_model_breakdown(record)
        assert abs(sum(model.percentage for model in models) - 100) <= len(models)

    def test_ties_keep_input_order(self):
        record = RawUsageRecord(
            total_cost=4.0,
            by_model={
                "first": ModelUsage(cost=1.0),
                "big": ModelUsage(cost=2.0),
                "second": ModelUsage(cost=1.0),
            },
        )
        assert [model.name for model in get_model_breakdown(record)] == ["big", "first", "second"]

    def test_empty(self):
        assert get_model_breakdown(RawUsageRecord()) == []


class TestDailyUsage:
    """Test the daily series."""

    def test_sorted_by_date_descending(self):
        daily = get_daily_usage(SAMPLE)
        assert [day.date for day in daily] == ["2025-01-14", "2025-01-13", "2025-01-12"]

    def test_values(self):
        daily = get_daily_usage(SAMPLE)

        assert daily[0].tokens == 2_500_000
        assert daily[0].cost == 45.23

    def test_limit(self):
        daily = get_daily_usage(SAMPLE, 2)
        assert [day.date for day in daily] == ["2025-01-14", "2025-01-13"]

    def test_non_positive_limit_ignored(self):
        assert len(get_daily_usage(SAMPLE, 0)) == 3

    def test_empty(self):
        assert get_daily_usage(RawUsageRecord()) == []


class TestTopModel:
    """Test top model selection."""

    def test_top_model(self):
        top = get_top_model(get_model_breakdown(SAMPLE))

        assert top.name == SONNET
        assert top.cost == 520.15

    def test_no_models(self):
        assert get_top_model([]) is None
        assert get_top_model(None) is None


class TestProcessData:
    """Test the combined processing step."""

    def test_all_period(self):
        result = process_data(SAMPLE)

        assert result.period == Period.ALL
        assert result.raw is SAMPLE
        assert result.summary.total_tokens == 125_000_000
        assert len(result.models) == 2
        assert len(result.daily_usage) == 3
        assert result.is_estimated is False
        assert result.source_count is None

    def test_filtered_period(self):
        result = process_data(SAMPLE, "week", reference_date=date(2025, 1, 14))

        assert result.period == Period.WEEK
        assert result.summary.total_cost == pytest.approx(45.23 + 38.12 + 52.87)
        assert result.is_estimated is True

    def test_source_count(self):
        assert process_data(SAMPLE, source_count=3).source_count == 3
