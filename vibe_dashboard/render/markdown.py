"""
Markdown rendering.

Builds the README fragment: metric table, collapsible usage chart and,
for the detailed layout, a per-model table.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from vibe_dashboard.config.loader import DashboardConfig, Layout
from vibe_dashboard.core.aggregator import DailyUsage, ProcessedResult, get_top_model
from vibe_dashboard.core.formatting import (
    format_cost,
    format_date,
    format_datetime,
    format_tokens,
    generate_bar,
    generate_progress_bar,
)
from vibe_dashboard.core.period import Period, get_period_label_key

from .i18n import t

PROJECT_URL = "https://github.com/mjyoo2/VibeDashboard"


def generate_markdown(
    result: ProcessedResult,
    config: DashboardConfig,
    now: Optional[datetime] = None,
) -> str:
    """Render processed usage as a Markdown fragment.

    Args:
        result: Processed usage data
        config: Dashboard configuration
        now: Timestamp for the footer (default: current UTC time)

    Returns:
        Markdown string
    """
    summary = result.summary
    language = config.language
    symbol = config.currency_symbol
    show = config.show_items

    lines: List[str] = []
    top_model = get_top_model(result.models)
    period_label = t(get_period_label_key(result.period), language)
    title_suffix = f" ({period_label})" if result.period != Period.ALL else ""

    lines.append(f"## 🎸 {t('title', language)}{title_suffix}")
    if result.source_count and result.source_count > 1:
        lines.append(f"> {t('mergedFrom', language, n=result.source_count)}")
    lines.append("")

    if show.total_tokens or show.total_cost or show.daily_average or show.model_breakdown:
        lines.append("| Metric | Value |")
        lines.append("|--------|-------|")

        if show.total_tokens:
            lines.append(f"| 🎯 {t('totalTokens', language)} | {format_tokens(summary.total_tokens)} |")
        if show.total_cost:
            lines.append(f"| 💰 {t('totalCost', language)} | {format_cost(summary.total_cost, symbol)} |")
        if show.daily_average:
            avg_tokens = format_tokens(summary.daily_average.tokens)
            avg_cost = format_cost(summary.daily_average.cost, symbol)
            lines.append(
                f"| 📅 {t('dailyAverage', language)} | "
                f"{avg_tokens} {t('tokens', language)} / {avg_cost} |"
            )
        if show.model_breakdown and top_model:
            lines.append(
                f"| 🤖 {t('topModel', language)} | "
                f"{top_model.short_name} ({top_model.percentage}%) |"
            )
        lines.append("")

    if show.period_chart and result.daily_usage:
        chart = generate_text_chart(result.daily_usage[:config.chart_days], symbol)
        if result.period == Period.ALL:
            chart_title = t("lastDays", language, n=config.chart_days)
        else:
            chart_title = t("periodUsage", language, period=period_label)

        lines.extend([
            "<details>",
            f"<summary>📊 {chart_title}</summary>",
            "",
            "```",
            chart,
            "```",
            "",
            "</details>",
            "",
        ])

    if config.layout == Layout.DETAILED and show.model_breakdown and result.models:
        lines.extend([
            "<details>",
            f"<summary>🤖 {t('modelBreakdown', language)}</summary>",
            "",
            "| Model | Usage | Cost |",
            "|-------|-------|------|",
        ])
        for model in result.models:
            bar = generate_progress_bar(model.percentage, 10)
            lines.append(
                f"| {model.short_name} | {bar} {model.percentage}% | "
                f"{format_cost(model.cost, symbol)} |"
            )
        lines.extend(["", "</details>", ""])

    if result.is_estimated and show.model_breakdown:
        lines.append(f"<sub>* {t('estimatedNote', language)}</sub>")
        lines.append("")

    if show.last_updated:
        lines.append(
            f"<sub>{t('updated', language)}: {format_datetime(now)} • "
            f"{t('poweredBy', language)} [VibeDashboard]({PROJECT_URL})</sub>"
        )

    return "\n".join(lines)


def generate_text_chart(daily_usage: Sequence[DailyUsage], currency_symbol: str = "$") -> str:
    """Text bar chart of daily tokens, oldest day first."""
    if not daily_usage:
        return ""

    days = list(reversed(daily_usage))
    max_tokens = max(day.tokens for day in days)

    return "\n".join(
        f"{format_date(day.date)} {generate_bar(day.tokens, max_tokens, 20)} "
        f"{format_tokens(day.tokens)} ({format_cost(day.cost, currency_symbol)})"
        for day in days
    )
