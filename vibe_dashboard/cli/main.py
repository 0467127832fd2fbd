"""
CLI interface for Vibe Dashboard.

Provides command-line access to dashboard generation, README setup,
input validation and source merging.
"""

import json
import logging
import sys
from typing import List, Optional

import typer
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from vibe_dashboard.config.loader import load_dashboard_config
from vibe_dashboard.core.aggregator import merge_usage_data
from vibe_dashboard.core.formatting import format_cost
from vibe_dashboard.core.period import Period
from vibe_dashboard.core.pipeline import DashboardError, generate_dashboard
from vibe_dashboard.core.records import RawUsageRecord, parse_usage_record
from vibe_dashboard.core.validator import validate_data
from vibe_dashboard.storage.readme import add_markers, has_markers
from vibe_dashboard.storage.sources import load_usage_file, load_usage_sources

app = typer.Typer()
console = Console()
err_console = Console(stderr=True)

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

DEFAULT_CONFIG_PATH = "./vibe-config.json"
DEFAULT_INPUT_PATH = "./cc.json"
DEFAULT_README_PATH = "./README.md"
DEFAULT_MERGED_PATH = "./merged-cc.json"


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _split_inputs(values: Optional[List[str]]) -> List[str]:
    """Flatten repeated and comma-separated --input values."""
    paths = []
    for value in values or []:
        paths.extend(part.strip() for part in value.split(",") if part.strip())
    return paths


def _print_record_summary(record: RawUsageRecord, title: str) -> None:
    table = Table(title=title, show_header=False)
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Total Cost", format_cost(record.total_cost))
    table.add_row("Models", str(len(record.by_model)))
    table.add_row("Days", str(len(record.by_day)))
    console.print(table)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Vibe Dashboard CLI."""
    _configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        console.print("Vibe Dashboard - Use --help to see available commands")


@app.command()
def generate(
    config_path: str = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="Path to config file"),
    inputs: Optional[List[str]] = typer.Option(
        None,
        "--input",
        "-i",
        help="Usage JSON file(s). Repeat the flag or separate paths with commas.",
    ),
    output: str = typer.Option(DEFAULT_README_PATH, "--output", "-o", help="Path to README file"),
    svg_output: Optional[str] = typer.Option(None, "--svg-output", "-s", help="Path to save SVG file"),
    theme: Optional[str] = typer.Option(None, "--theme", help="Theme: dark or light"),
    layout: Optional[str] = typer.Option(None, "--layout", help="Layout: card, minimal, or detailed"),
    language: Optional[str] = typer.Option(None, "--language", help="Language: en, ko, or ja"),
    period: Optional[str] = typer.Option(None, "--period", help="Time period: day, week, month, or all"),
):
    """Generate the dashboard and update the README."""
    console.print("🎸 Vibe Dashboard - Generating dashboard...\n")

    input_paths = _split_inputs(inputs) or [DEFAULT_INPUT_PATH]
    overrides = {"theme": theme, "layout": layout, "language": language, "period": period}

    try:
        config = load_dashboard_config(config_path, overrides)
    except (ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Config error:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)

    try:
        result = generate_dashboard(
            input_paths=input_paths,
            output_path=output,
            config=config,
            svg_path=svg_output,
        )
    except DashboardError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)

    console.print("[green]✓[/] Dashboard generated successfully")
    console.print(f"   📄 README updated: {result.readme_path}")
    if result.svg_path:
        console.print(f"   🖼️  SVG saved to {result.svg_path}")
    if result.sources > 1:
        console.print(f"   📦 Merged {result.sources} sources")
    if result.period != Period.ALL:
        console.print(f"   📅 Period: {result.period.value}")
    if result.is_estimated:
        console.print("   [dim]Model and token figures are estimated for this period[/]")
    sys.exit(EXIT_CODE_PASS)


@app.command()
def init(
    output: str = typer.Option(DEFAULT_README_PATH, "--output", "-o", help="Path to README file"),
):
    """Add dashboard markers to the README."""
    if has_markers(output):
        console.print(f"[green]✓[/] Markers already exist in {output}")
        sys.exit(EXIT_CODE_PASS)

    try:
        add_markers(output)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)

    console.print(f"[green]✓[/] Markers added to {output}")
    console.print("\nNext steps:")
    console.print("1. Generate your usage data: ccusage --json > cc.json")
    console.print("2. Run: vibe-dashboard generate")
    sys.exit(EXIT_CODE_PASS)


@app.command()
def validate(
    input_path: str = typer.Option(DEFAULT_INPUT_PATH, "--input", "-i", help="Path to usage JSON file"),
):
    """Validate a usage JSON file."""
    try:
        data = load_usage_file(input_path)
    except FileNotFoundError:
        console.print(f"[red]File not found:[/] {input_path}")
        sys.exit(EXIT_CODE_FAIL)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)

    validation = validate_data(data)
    if not validation.is_valid:
        console.print("[red]Validation errors:[/]")
        for error in validation.errors:
            console.print(f"   - {error}")
        sys.exit(EXIT_CODE_FAIL)

    console.print("[green]✓[/] Input file is valid")
    _print_record_summary(parse_usage_record(data), "Summary")
    sys.exit(EXIT_CODE_PASS)


@app.command()
def merge(
    inputs: Optional[List[str]] = typer.Option(
        None,
        "--input",
        "-i",
        help="Usage JSON files to merge. Repeat the flag or separate paths with commas.",
    ),
    output: str = typer.Option(DEFAULT_MERGED_PATH, "--output", "-o", help="Output path for merged JSON"),
):
    """Merge several usage JSON files into one."""
    input_paths = _split_inputs(inputs)
    if len(input_paths) < 2:
        console.print("[red]Error:[/] At least 2 input files required for merging")
        sys.exit(EXIT_CODE_FAIL)

    try:
        documents = load_usage_sources(input_paths)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error:[/] {e}")
        sys.exit(EXIT_CODE_FAIL)

    records = []
    for document in documents:
        validation = validate_data(document.data)
        if not validation.is_valid:
            console.print(f"[red]Invalid data in {document.path}:[/] {', '.join(validation.errors)}")
            sys.exit(EXIT_CODE_FAIL)
        records.append(parse_usage_record(document.data))

    merged = merge_usage_data(records)
    with open(output, "w", encoding="utf-8") as f:
        json.dump(merged.to_dict(), f, indent=2)

    console.print(f"[green]✓[/] Merged {len(input_paths)} files into {output}")
    _print_record_summary(merged, "Merged summary")
    sys.exit(EXIT_CODE_PASS)


if __name__ == "__main__":
    app()
