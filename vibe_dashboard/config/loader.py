"""
Configuration management and loading.

Handles dashboard settings from a YAML or JSON file plus command-line overrides.
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from vibe_dashboard.core.period import Period
from vibe_dashboard.render.i18n import get_supported_languages

logger = logging.getLogger(__name__)


class Theme(Enum):
    """SVG color themes."""
    DARK = "dark"
    LIGHT = "light"


class Layout(Enum):
    """Dashboard layouts."""
    CARD = "card"
    MINIMAL = "minimal"    # Markdown only, no SVG
    DETAILED = "detailed"  # adds the per-model table


@dataclass(frozen=True)
class ShowItems:
    """Toggles for individual dashboard sections."""
    total_tokens: bool = True
    total_cost: bool = True
    period_chart: bool = True
    model_breakdown: bool = True
    daily_average: bool = True
    last_updated: bool = True


@dataclass(frozen=True)
class DashboardConfig:
    """Complete dashboard configuration."""
    theme: Theme = Theme.DARK
    layout: Layout = Layout.CARD
    period: Period = Period.ALL
    show_items: ShowItems = field(default_factory=ShowItems)
    chart_days: int = 14
    language: str = "en"
    currency_symbol: str = "$"
    sources: Tuple[str, ...] = ()

    def __post_init__(self):
        """Validate numeric settings."""
        if self.chart_days <= 0:
            raise ValueError("chartDays must be > 0")


_SHOW_ITEM_KEYS = {
    "totalTokens": "total_tokens",
    "totalCost": "total_cost",
    "periodChart": "period_chart",
    "modelBreakdown": "model_breakdown",
    "dailyAverage": "daily_average",
    "lastUpdated": "last_updated",
}

# Older config files used weeklyChart before charts followed the period
_LEGACY_SHOW_ITEM_KEYS = {"weeklyChart": "period_chart"}

_ALLOWED_TOP_KEYS = {
    "theme", "layout", "period", "showItems", "chartDays",
    "language", "currencySymbol", "sources",
}


def load_dashboard_config(
    path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    missing_ok: bool = True,
) -> DashboardConfig:
    """Load and validate dashboard configuration.

    File values are applied over the defaults, then overrides over the file.
    Keys use the config file spelling (camelCase). JSON files load too,
    since JSON is valid YAML.

    Args:
        path: Path to the config file (optional)
        overrides: Settings taking precedence over the file, e.g. CLI flags
        missing_ok: Fall back to defaults when the file does not exist

    Returns:
        Validated DashboardConfig object

    Raises:
        FileNotFoundError: If the file is missing and missing_ok is False
        yaml.YAMLError: If the file is not valid YAML/JSON
        ValueError: If configuration is invalid
    """
    raw_config: Dict[str, Any] = {}

    if path:
        config_path = Path(path)
        if config_path.exists():
            raw_config = _read_config_file(config_path)
        elif missing_ok:
            logger.debug("Config file %s not found, using defaults", path)
        else:
            raise FileNotFoundError(f"Dashboard config file not found: {path}")

    merged = dict(raw_config)
    for key, value in (overrides or {}).items():
        if value is None:
            continue
        if key == "showItems" and isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value

    return parse_dashboard_config(merged)


def _read_config_file(config_path: Path) -> Dict[str, Any]:
    with open(config_path, "r", encoding="utf-8") as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {config_path}: {e}")

    if raw_config is None:
        return {}
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")
    return raw_config


def parse_dashboard_config(raw_config: Dict[str, Any]) -> DashboardConfig:
    """Validate a raw configuration mapping.

    Args:
        raw_config: Mapping with config file keys

    Returns:
        Validated DashboardConfig

    Raises:
        ValueError: If configuration is invalid
    """
    unknown_keys = set(raw_config.keys()) - _ALLOWED_TOP_KEYS
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    config = DashboardConfig()
    values: Dict[str, Any] = {}

    if "theme" in raw_config:
        values["theme"] = _parse_enum(Theme, raw_config["theme"], "theme")
    if "layout" in raw_config:
        values["layout"] = _parse_enum(Layout, raw_config["layout"], "layout")

    if "period" in raw_config:
        # Unrecognized periods fall back to 'all' with a warning
        values["period"] = Period.parse(raw_config["period"])

    if "showItems" in raw_config:
        values["show_items"] = _parse_show_items(raw_config["showItems"])

    if "chartDays" in raw_config:
        chart_days = raw_config["chartDays"]
        if not isinstance(chart_days, int) or isinstance(chart_days, bool) or chart_days <= 0:
            raise ValueError("'chartDays' must be a positive integer")
        values["chart_days"] = chart_days

    if "language" in raw_config:
        language = raw_config["language"]
        supported = get_supported_languages()
        if not isinstance(language, str) or language not in supported:
            raise ValueError(f"'language' must be one of: {supported}")
        values["language"] = language

    if "currencySymbol" in raw_config:
        symbol = raw_config["currencySymbol"]
        if not isinstance(symbol, str):
            raise ValueError("'currencySymbol' must be a string")
        values["currency_symbol"] = symbol

    if "sources" in raw_config:
        sources = raw_config["sources"]
        if not isinstance(sources, list) or not all(isinstance(s, str) for s in sources):
            raise ValueError("'sources' must be a list of file paths")
        values["sources"] = tuple(sources)

    return replace(config, **values)


def _parse_enum(enum_cls, value: Any, key: str):
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string")
    try:
        return enum_cls(value.lower())
    except ValueError:
        valid = [member.value for member in enum_cls]
        raise ValueError(f"'{key}' must be one of: {valid}")


def _parse_show_items(data: Any) -> ShowItems:
    """Parse and validate the showItems section.

    Args:
        data: showItems mapping

    Returns:
        Validated ShowItems

    Raises:
        ValueError: If the section is invalid
    """
    if not isinstance(data, dict):
        raise ValueError("'showItems' must be a dictionary")

    allowed_keys = set(_SHOW_ITEM_KEYS) | set(_LEGACY_SHOW_ITEM_KEYS)
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in showItems: {unknown_keys}")

    values = {}
    for key, value in data.items():
        if not isinstance(value, bool):
            raise ValueError(f"'showItems.{key}' must be true or false")
        attr = _SHOW_ITEM_KEYS.get(key) or _LEGACY_SHOW_ITEM_KEYS[key]
        if key in _LEGACY_SHOW_ITEM_KEYS and "periodChart" in data:
            continue
        values[attr] = value

    return ShowItems(**values)
