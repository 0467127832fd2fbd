"""
SVG card rendering.

Produces a self-contained 900px card with headline stats, a daily bar chart
and the top models. Every piece of text is XML-escaped.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from vibe_dashboard.config.loader import DashboardConfig, Layout, Theme
from vibe_dashboard.core.aggregator import DailyUsage, ModelBreakdown, ProcessedResult
from vibe_dashboard.core.formatting import (
    escape_xml,
    format_cost,
    format_date,
    format_datetime,
    format_tokens,
)
from vibe_dashboard.core.period import (
    Period,
    get_period_label_key,
    get_period_range,
    is_date_in_range,
)

from .i18n import t
from .markdown import PROJECT_URL

WIDTH = 900
BASE_HEIGHT = 320
MAX_MODELS = 5


@dataclass(frozen=True)
class ThemeColors:
    """Color palette for one theme."""
    background: str
    border: str
    title: str
    text: str
    accent: str
    bar_filled: str
    bar_empty: str
    chart_bg: str


THEMES: Dict[Theme, ThemeColors] = {
    Theme.DARK: ThemeColors(
        background="#0d1117",
        border="#30363d",
        title="#c9d1d9",
        text="#8b949e",
        accent="#58a6ff",
        bar_filled="#58a6ff",
        bar_empty="#21262d",
        chart_bg="#161b22",
    ),
    Theme.LIGHT: ThemeColors(
        background="#ffffff",
        border="#d0d7de",
        title="#24292f",
        text="#57606a",
        accent="#0969da",
        bar_filled="#0969da",
        bar_empty="#eaeef2",
        chart_bg="#f6f8fa",
    ),
}


@dataclass(frozen=True)
class _Totals:
    tokens: int = 0
    cost: float = 0.0


def _num(value: float) -> str:
    """Compact number for SVG attributes."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _window_totals(daily_usage: Sequence[DailyUsage], period: Period, now: datetime) -> _Totals:
    period_range = get_period_range(period, now)
    tokens = 0
    cost = 0.0
    for day in daily_usage:
        if is_date_in_range(day.date, period_range):
            tokens += day.tokens
            cost += day.cost
    return _Totals(tokens=tokens, cost=cost)


def generate_svg(
    result: ProcessedResult,
    config: DashboardConfig,
    now: Optional[datetime] = None,
) -> str:
    """Render processed usage as an SVG card.

    Args:
        result: Processed usage data
        config: Dashboard configuration
        now: Reference time for today/week/month figures and the footer

    Returns:
        SVG document string
    """
    if now is None:
        now = datetime.now(timezone.utc)

    colors = THEMES[config.theme]
    language = config.language
    symbol = config.currency_symbol
    show = config.show_items
    summary = result.summary

    model_count = min(len(result.models), MAX_MODELS)
    if config.layout == Layout.DETAILED:
        height = BASE_HEIGHT + 50
    else:
        height = BASE_HEIGHT + model_count * 18

    period_label = t(get_period_label_key(result.period), language)
    title_suffix = f" ({period_label})" if result.period != Period.ALL else ""

    today = _window_totals(result.daily_usage, Period.DAY, now)
    week = _window_totals(result.daily_usage, Period.WEEK, now)
    month = _window_totals(result.daily_usage, Period.MONTH, now)

    font = "'Segoe UI', Ubuntu, Sans-Serif"
    parts: List[str] = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{WIDTH}" height="{height}" '
        f'viewBox="0 0 {WIDTH} {height}">',
        "  <style>",
        f"    .title {{ font: 600 20px {font}; fill: {colors.title}; }}",
        f"    .stat-label {{ font: 400 13px {font}; fill: {colors.text}; }}",
        f"    .stat-value {{ font: 600 18px {font}; fill: {colors.title}; }}",
        f"    .stat-value-small {{ font: 600 14px {font}; fill: {colors.title}; }}",
        f"    .section-title {{ font: 600 14px {font}; fill: {colors.text}; }}",
        f"    .model-label {{ font: 400 12px {font}; fill: {colors.text}; }}",
        f"    .footer {{ font: 400 11px {font}; fill: {colors.text}; }}",
        "  </style>",
        "",
        "  <!-- Background -->",
        f'  <rect x="0.5" y="0.5" width="{WIDTH - 1}" height="{height - 1}" rx="4.5" '
        f'fill="{colors.background}" stroke="{colors.border}"/>',
        "",
        "  <!-- Title -->",
        f'  <text x="25" y="35" class="title">🎸 '
        f'{escape_xml(t("dashboardTitle", language))}{escape_xml(title_suffix)}</text>',
        "",
        "  <!-- Stats Row -->",
        '  <g transform="translate(25, 60)">',
    ]

    if show.total_tokens:
        parts.append(_stat(0, t("totalTokens", language), format_tokens(summary.total_tokens), "stat-value"))
    if show.total_cost:
        parts.append(_stat(150, t("totalCost", language), format_cost(summary.total_cost, symbol), "stat-value"))

    for offset, icon, key, totals in (
        (320, "📅", "today", today),
        (510, "📊", "thisWeek", week),
        (710, "📈", "thisMonth", month),
    ):
        value = f"{format_tokens(totals.tokens)} / {format_cost(totals.cost, symbol)}"
        parts.append(_stat(offset, f"{icon} {t(key, language)}", value, "stat-value-small"))

    parts.append("  </g>")

    show_chart = show.period_chart and bool(result.daily_usage)
    if show_chart:
        chart_days = list(reversed(result.daily_usage[:config.chart_days]))
        parts.append(_chart(chart_days, colors, 25, 105, 850, 100))

    if show.model_breakdown and result.models:
        y_offset = 220 if show_chart else 105
        parts.append(_model_breakdown(
            result.models[:MAX_MODELS], colors, 25, y_offset, 850,
            symbol, t("modelBreakdown", language), result.is_estimated,
        ))

    if show.last_updated:
        parts.append(
            f'  <text x="25" y="{height - 20}" class="footer">'
            f'{escape_xml(t("updated", language))}: {escape_xml(format_datetime(now))} • '
            f'{escape_xml(t("poweredBy", language))} '
            f'<a href="{PROJECT_URL}" target="_blank">VibeDashboard</a></text>'
        )

    parts.append("</svg>")
    return "\n".join(parts)


def _stat(x: int, label: str, value: str, value_class: str) -> str:
    transform = f' transform="translate({x}, 0)"' if x else ""
    return (
        f"    <g{transform}>\n"
        f'      <text class="stat-label">{escape_xml(label)}</text>\n'
        f'      <text y="22" class="{value_class}">{escape_xml(value)}</text>\n'
        f"    </g>"
    )


def _chart(
    days: Sequence[DailyUsage],
    colors: ThemeColors,
    x: int,
    y: int,
    width: int,
    height: int,
) -> str:
    """Bar chart of daily tokens, days in chronological order."""
    if not days:
        return ""

    max_tokens = max(day.tokens for day in days)
    y_axis_width = 50
    chart_width = width - y_axis_width
    bar_width = max((chart_width - 20) // len(days) - 6, 1)
    max_bar_height = height - 25

    lines = [
        "",
        "  <!-- Usage Chart -->",
        f'  <g transform="translate({x}, {y})">',
        f'    <rect x="0" y="0" width="{width}" height="{height}" rx="4" fill="{colors.chart_bg}"/>',
    ]

    for i, value in enumerate((max_tokens, max_tokens / 2, 0)):
        label_y = 5 + i * (max_bar_height / 2) + 10
        lines.append(
            f'    <text x="{y_axis_width - 5}" y="{_num(label_y)}" text-anchor="end" '
            f'class="model-label">{escape_xml(format_tokens(value))}</text>'
        )

    lines.append(
        f'    <line x1="{y_axis_width}" y1="5" x2="{y_axis_width}" y2="{max_bar_height + 5}" '
        f'stroke="{colors.border}" stroke-width="1"/>'
    )

    for i, day in enumerate(days):
        if max_tokens > 0:
            bar_height = max((day.tokens / max_tokens) * max_bar_height, 2)
        else:
            bar_height = 2
        bar_x = y_axis_width + 10 + i * (bar_width + 6)
        bar_y = max_bar_height - bar_height + 5
        lines.append(
            f'    <rect x="{bar_x}" y="{_num(bar_y)}" width="{bar_width}" '
            f'height="{_num(bar_height)}" rx="3" fill="{colors.bar_filled}"/>'
        )
        lines.append(
            f'    <text x="{_num(bar_x + bar_width / 2)}" y="{height - 5}" text-anchor="middle" '
            f'class="model-label">{escape_xml(format_date(day.date))}</text>'
        )

    lines.append("  </g>")
    return "\n".join(lines)


def _model_breakdown(
    models: Sequence[ModelBreakdown],
    colors: ThemeColors,
    x: int,
    y: int,
    width: int,
    currency_symbol: str,
    title: str,
    estimated: bool,
) -> str:
    """Horizontal share bars for the top models."""
    bar_width = width - 180
    row_height = 20
    heading = f"🤖 {title}*" if estimated else f"🤖 {title}"

    lines = [
        "",
        "  <!-- Model Breakdown -->",
        f'  <g transform="translate({x}, {y})">',
        f'    <text class="section-title">{escape_xml(heading)}</text>',
    ]

    for i, model in enumerate(models):
        row_y = 18 + i * row_height
        filled_width = (model.percentage / 100) * bar_width
        label = f"{model.short_name} {model.percentage}% ({format_cost(model.cost, currency_symbol)})"
        lines.extend([
            f'    <g transform="translate(0, {row_y})">',
            f'      <rect x="0" y="2" width="{bar_width}" height="10" rx="3" fill="{colors.bar_empty}"/>',
            f'      <rect x="0" y="2" width="{_num(filled_width)}" height="10" rx="3" fill="{colors.bar_filled}"/>',
            f'      <text x="{bar_width + 10}" y="11" class="model-label">{escape_xml(label)}</text>',
            "    </g>",
        ])

    lines.append("  </g>")
    return "\n".join(lines)
