"""
Dashboard generation pipeline.

Loads usage sources, validates and merges them, filters to the configured
period, renders the dashboard and patches the README.

Each stage hands immutable values to the next:
1. Load - read every source file concurrently
2. Validate - reject sources with the wrong shape before any arithmetic
3. Merge and filter - combine sources, then restrict to the period
4. Render and patch - build Markdown/SVG and splice into the README
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

from vibe_dashboard.config.loader import DashboardConfig
from vibe_dashboard.render.dashboard import RenderedDashboard, generate
from vibe_dashboard.storage.readme import MarkersNotFoundError, update_readme, write_svg
from vibe_dashboard.storage.sources import load_usage_sources

from .aggregator import ProcessedResult, merge_usage_data, process_data
from .period import Period
from .records import RawUsageRecord, parse_usage_record
from .validator import validate_data

logger = logging.getLogger(__name__)


class DashboardError(Exception):
    """Raised when the dashboard cannot be generated."""


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of a successful generation run."""
    readme_path: str
    svg_path: Optional[str]
    sources: int
    period: Period
    is_estimated: bool


def generate_dashboard(
    input_paths: Sequence[str],
    output_path: str,
    config: DashboardConfig,
    svg_path: Optional[str] = None,
    reference_date: Optional[datetime] = None,
) -> GenerationResult:
    """Generate the dashboard from usage files and update the README.

    When an SVG path is given the README gets an image link to the card,
    otherwise it gets the Markdown fragment.

    Args:
        input_paths: Usage JSON files; config.sources are appended
        output_path: README to patch
        config: Dashboard configuration
        svg_path: Where to write the SVG card (optional)
        reference_date: "Now" for period windows (default: current UTC time)

    Returns:
        GenerationResult describing what was written

    Raises:
        DashboardError: If any source is missing, unparseable or invalid,
            or the README cannot be patched
    """
    paths = _collect_paths(input_paths, config.sources)
    if not paths:
        raise DashboardError("No input files given")

    try:
        documents = load_usage_sources(paths)
    except FileNotFoundError as e:
        raise DashboardError(str(e)) from e
    except json.JSONDecodeError as e:
        raise DashboardError(f"Failed to parse input: {e}") from e

    records = []
    for document in documents:
        validation = validate_data(document.data)
        if not validation.is_valid:
            raise DashboardError(f"Invalid data in {document.path}: {', '.join(validation.errors)}")
        records.append(parse_usage_record(document.data))

    result = _process(records, config, reference_date)
    rendered = generate(result, config, now=reference_date)

    if svg_path and rendered.svg:
        readme_content = f"![Vibe Dashboard](./{Path(svg_path).name})"
    else:
        readme_content = rendered.markdown

    try:
        update_readme(output_path, readme_content)
    except (FileNotFoundError, MarkersNotFoundError) as e:
        raise DashboardError(str(e)) from e

    written_svg = None
    if svg_path and rendered.svg:
        try:
            write_svg(svg_path, rendered.svg)
            written_svg = svg_path
        except OSError as e:
            logger.warning("Failed to write SVG: %s", e)

    return GenerationResult(
        readme_path=output_path,
        svg_path=written_svg,
        sources=len(records),
        period=result.period,
        is_estimated=result.is_estimated,
    )


def generate_from_data(
    data: Union[Any, List[Any]],
    config: Optional[DashboardConfig] = None,
    reference_date: Optional[datetime] = None,
) -> RenderedDashboard:
    """Render a dashboard from in-memory usage data without file I/O.

    Args:
        data: One usage object (either shape) or a list of them
        config: Dashboard configuration (default settings if omitted)
        reference_date: "Now" for period windows

    Returns:
        RenderedDashboard with Markdown and SVG
    """
    config = config or DashboardConfig()
    items = data if isinstance(data, list) else [data]
    records = [parse_usage_record(item) for item in items]
    result = _process(records, config, reference_date)
    return generate(result, config, now=reference_date)


def _process(
    records: List[RawUsageRecord],
    config: DashboardConfig,
    reference_date: Optional[datetime],
) -> ProcessedResult:
    merged = merge_usage_data(records)
    source_count = len(records) if len(records) > 1 else None
    if source_count:
        logger.info("Merged %d sources", source_count)
    return process_data(merged, config.period, reference_date, source_count=source_count)


def _collect_paths(input_paths: Sequence[str], extra: Sequence[str]) -> List[str]:
    paths: List[str] = []
    for path in list(input_paths) + list(extra):
        if path and path not in paths:
            paths.append(path)
    return paths
