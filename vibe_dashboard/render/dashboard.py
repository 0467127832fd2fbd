"""
Combined dashboard rendering.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from vibe_dashboard.config.loader import DashboardConfig, Layout
from vibe_dashboard.core.aggregator import ProcessedResult

from .markdown import generate_markdown
from .svg import generate_svg


@dataclass(frozen=True)
class RenderedDashboard:
    """Rendered dashboard content."""
    markdown: str
    svg: Optional[str]


def generate(
    result: ProcessedResult,
    config: DashboardConfig,
    now: Optional[datetime] = None,
) -> RenderedDashboard:
    """Render Markdown and, unless the layout is minimal, an SVG card."""
    markdown = generate_markdown(result, config, now=now)
    svg = None if config.layout == Layout.MINIMAL else generate_svg(result, config, now=now)
    return RenderedDashboard(markdown=markdown, svg=svg)
