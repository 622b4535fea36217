"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/cli/commands/compare.py
--------------------------------------------------------------------------------
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from mapbench.analysis.comparison import compare_aligner_outputs
from mapbench.artifacts.layout import BenchmarkFolder
from mapbench.cli.commands.common import CONFIG_OPTION, console, load_config_or_exit
from mapbench.errors import ArtifactParseError, ConfigError, ProcessFailedError
from mapbench.parsers.comparison import SCOPE_LABELS, DetailedMappedReadsComparison


def _render(comparison: DetailedMappedReadsComparison) -> None:
    general = Table(title="All queries", header_style="bold")
    general.add_column("Metric")
    general.add_column("Count", justify="right")
    for key, value in comparison.general_stats.model_dump().items():
        general.add_row(key, str(value))
    console.print(general)

    scoped = Table(title="Per scope", header_style="bold")
    scoped.add_column("Metric")
    for key in SCOPE_LABELS:
        scoped.add_column(SCOPE_LABELS[key], justify="right")
    scopes = [stats.model_dump() for _, stats in comparison.scopes()]
    for metric in scopes[0]:
        scoped.add_row(metric, *(f"{values[metric]:g}" for values in scopes))
    console.print(scoped)


def compare(
    floxer_mapped_reads: Path = typer.Argument(..., help="floxer output (BAM).", metavar="FLOXER"),
    minimap_mapped_reads: Path = typer.Argument(..., help="minimap2 output (SAM/BAM).", metavar="MINIMAP"),
    error_rate: Optional[float] = typer.Option(
        None,
        "--error-rate",
        help="Error rate for the comparison (default: comparison_error_rate from the config).",
    ),
    out_dir: Path = typer.Option(Path("."), "--out-dir", help="Folder for detailed_aligner_comparison.toml."),
    config: Path = CONFIG_OPTION,
) -> None:
    suite_config = load_config_or_exit(config)
    rate = suite_config.comparison_error_rate if error_rate is None else error_rate
    try:
        comparison = compare_aligner_outputs(
            floxer_mapped_reads,
            minimap_mapped_reads,
            rate,
            BenchmarkFolder(out_dir),
            suite_config,
        )
    except (ConfigError, ProcessFailedError, ArtifactParseError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1)
    _render(comparison)
