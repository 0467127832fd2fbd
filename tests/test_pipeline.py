"""
Integration tests for the generation pipeline.

Exercises loading, validation, merging, rendering and README patching
against real files in a temporary directory.
"""

import json
from datetime import datetime, timezone

import pytest

from vibe_dashboard.config.loader import DashboardConfig, Layout
from vibe_dashboard.core.period import Period
from vibe_dashboard.core.pipeline import DashboardError, generate_dashboard, generate_from_data
from vibe_dashboard.storage.readme import END_MARKER, START_MARKER


NOW = datetime(2025, 1, 14, 9, 0, tzinfo=timezone.utc)

CANONICAL = {
    "totalCost": 100.0,
    "totalInputTokens": 1_000_000,
    "totalOutputTokens": 500_000,
    "byModel": {"claude-sonnet-4-20250514": {"cost": 100.0, "inputTokens": 1_000_000, "outputTokens": 500_000}},
    "byDay": {
        "2025-01-14": {"cost": 60.0, "tokens": 900_000},
        "2024-11-01": {"cost": 40.0, "tokens": 600_000},
    },
}

EXTERNAL = {
    "daily": [
        {
            "date": "2025-01-14",
            "inputTokens": 100_000,
            "outputTokens": 50_000,
            "totalTokens": 150_000,
            "totalCost": 20.0,
            "modelBreakdowns": [
                {"modelName": "claude-opus-4-20250514", "cost": 20.0, "inputTokens": 100_000, "outputTokens": 50_000},
            ],
        },
    ],
    "totals": {"inputTokens": 100_000, "outputTokens": 50_000, "totalCost": 20.0},
}


@pytest.fixture
def workspace(tmp_path):
    """A README with markers and two usage files."""
    readme = tmp_path / "README.md"
    readme.write_text(f"# Me\n\n{START_MARKER}\n{END_MARKER}\n", encoding="utf-8")
    canonical = tmp_path / "cc.json"
    canonical.write_text(json.dumps(CANONICAL), encoding="utf-8")
    external = tmp_path / "laptop.json"
    external.write_text(json.dumps(EXTERNAL), encoding="utf-8")
    return tmp_path


class TestGenerateDashboard:
    """Test end-to-end generation."""

    def test_markdown_into_readme(self, workspace):
        readme = workspace / "README.md"

        result = generate_dashboard(
            [str(workspace / "cc.json")], str(readme), DashboardConfig(), reference_date=NOW,
        )

        content = readme.read_text(encoding="utf-8")
        assert "| 💰 Total Cost | $100.00 |" in content
        assert content.startswith("# Me\n\n")
        assert result.readme_path == str(readme)
        assert result.svg_path is None
        assert result.sources == 1
        assert result.period == Period.ALL
        assert result.is_estimated is False

    def test_svg_link_into_readme(self, workspace):
        readme = workspace / "README.md"
        svg_path = workspace / "assets" / "vibe.svg"

        result = generate_dashboard(
            [str(workspace / "cc.json")], str(readme), DashboardConfig(),
            svg_path=str(svg_path), reference_date=NOW,
        )

        assert "![Vibe Dashboard](./vibe.svg)" in readme.read_text(encoding="utf-8")
        assert svg_path.read_text(encoding="utf-8").startswith("<svg")
        assert result.svg_path == str(svg_path)

    def test_minimal_layout_ignores_svg_path(self, workspace):
        readme = workspace / "README.md"
        svg_path = workspace / "vibe.svg"

        result = generate_dashboard(
            [str(workspace / "cc.json")], str(readme), DashboardConfig(layout=Layout.MINIMAL),
            svg_path=str(svg_path), reference_date=NOW,
        )

        assert result.svg_path is None
        assert not svg_path.exists()
        assert "| Metric | Value |" in readme.read_text(encoding="utf-8")

    def test_merges_both_shapes(self, workspace):
        readme = workspace / "README.md"

        result = generate_dashboard(
            [str(workspace / "cc.json"), str(workspace / "laptop.json")],
            str(readme), DashboardConfig(), reference_date=NOW,
        )

        content = readme.read_text(encoding="utf-8")
        assert result.sources == 2
        assert "> Merged from 2 sources" in content
        assert "| 💰 Total Cost | $120.00 |" in content

    def test_config_sources_appended(self, workspace):
        config = DashboardConfig(sources=(str(workspace / "laptop.json"), str(workspace / "cc.json")))

        result = generate_dashboard(
            [str(workspace / "cc.json")], str(workspace / "README.md"), config, reference_date=NOW,
        )

        assert result.sources == 2

    def test_period_filter(self, workspace):
        readme = workspace / "README.md"

        result = generate_dashboard(
            [str(workspace / "cc.json")], str(readme),
            DashboardConfig(period=Period.WEEK), reference_date=NOW,
        )

        content = readme.read_text(encoding="utf-8")
        assert result.period == Period.WEEK
        assert result.is_estimated is True
        assert "| 💰 Total Cost | $60.00 |" in content

    def test_no_inputs(self, workspace):
        with pytest.raises(DashboardError, match="No input files given"):
            generate_dashboard([], str(workspace / "README.md"), DashboardConfig())

    def test_missing_input(self, workspace):
        with pytest.raises(DashboardError, match="Input file not found"):
            generate_dashboard([str(workspace / "nope.json")], str(workspace / "README.md"), DashboardConfig())

    def test_unparseable_input(self, workspace):
        broken = workspace / "broken.json"
        broken.write_text("{", encoding="utf-8")

        with pytest.raises(DashboardError, match="Failed to parse input"):
            generate_dashboard([str(broken)], str(workspace / "README.md"), DashboardConfig())

    def test_invalid_input_leaves_readme(self, workspace):
        readme = workspace / "README.md"
        before = readme.read_text(encoding="utf-8")
        invalid = workspace / "invalid.json"
        invalid.write_text(json.dumps({"byModel": "invalid"}), encoding="utf-8")

        with pytest.raises(DashboardError, match="Invalid data in .*totalCost must be a number"):
            generate_dashboard([str(invalid)], str(readme), DashboardConfig())

        assert readme.read_text(encoding="utf-8") == before

    def test_readme_without_markers(self, workspace):
        readme = workspace / "README.md"
        readme.write_text("# Me\n", encoding="utf-8")

        with pytest.raises(DashboardError, match="Markers not found"):
            generate_dashboard([str(workspace / "cc.json")], str(readme), DashboardConfig())

    def test_missing_readme(self, workspace):
        with pytest.raises(DashboardError, match="File not found"):
            generate_dashboard([str(workspace / "cc.json")], str(workspace / "OTHER.md"), DashboardConfig())


class TestGenerateFromData:
    """Test in-memory rendering."""

    def test_single_object(self):
        rendered = generate_from_data(CANONICAL, reference_date=NOW)

        assert "| 💰 Total Cost | $100.00 |" in rendered.markdown
        assert rendered.svg.startswith("<svg")

    def test_list_of_objects(self):
        rendered = generate_from_data([CANONICAL, EXTERNAL], reference_date=NOW)
        assert "> Merged from 2 sources" in rendered.markdown

    def test_external_shape(self):
        rendered = generate_from_data(EXTERNAL, reference_date=NOW)
        assert "| 🤖 Top Model | opus-4 (100%) |" in rendered.markdown
