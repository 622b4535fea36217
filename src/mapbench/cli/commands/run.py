"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/cli/commands/run.py
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.table import Table

from mapbench.benchmarks.catalog import BENCHMARKS
from mapbench.benchmarks.sweep import BenchmarkContext, SweepResult, run_benchmarks
from mapbench.cli.commands.common import CONFIG_OPTION, console, load_config_or_exit
from mapbench.core.datasets import Queries, Reference
from mapbench.core.params import BenchmarkConfig, ProfileConfig
from mapbench.errors import BenchmarkBatchError, ConfigError

logger = logging.getLogger(__name__)


def _render_results(results: list[SweepResult]) -> None:
    table = Table(title="Benchmark results", header_style="bold")
    table.add_column("Benchmark")
    table.add_column("Instances")
    table.add_column("Executed")
    table.add_column("Link updated")
    table.add_column("Folder")
    for result in results:
        table.add_row(
            result.name,
            str(len(result.floxer_results)),
            str(result.num_executed),
            "yes" if result.most_recent_link_updated else "no",
            str(result.benchmark_folder.path),
        )
    console.print(table)


def run(
    benchmarks: Optional[list[str]] = typer.Argument(
        None,
        help="Benchmarks to run (default: all). See `mapbench list`.",
        metavar="BENCHMARK...",
    ),
    config: Path = CONFIG_OPTION,
    reference: Reference = typer.Option(Reference.HUMAN_GENOME_HG38, "--reference", help="Reference dataset."),
    queries: Queries = typer.Option(Queries.HUMAN_WGS_NANOPORE, "--queries", help="Query dataset."),
    tag: Optional[str] = typer.Option(None, "--tag", help="Suffix for the timestamped benchmark folder."),
    only_analysis: bool = typer.Option(
        False,
        "--only-analysis",
        help="Reuse the most recent results instead of running the aligners again, where available.",
    ),
    profile: bool = typer.Option(False, "--profile", help="Record perf profiles and render flamegraphs."),
    on_instance_error: str = typer.Option(
        "abort",
        "--on-instance-error",
        help="abort: stop a sweep at its first failing instance; continue: record the failure and go on.",
    ),
    table_format: str = typer.Option("csv", "--table-format", help="Summary table format (csv or parquet)."),
) -> None:
    names = list(benchmarks) if benchmarks else list(BENCHMARKS)
    suite_config = load_config_or_exit(config)
    try:
        benchmark_config = BenchmarkConfig(
            reference=reference,
            queries=queries,
            tag=tag,
            only_analysis=only_analysis,
        )
        context = BenchmarkContext(
            suite_config=suite_config,
            benchmark_config=benchmark_config,
            profile=ProfileConfig.from_flag(profile),
            on_instance_error=on_instance_error,
            table_format=table_format.strip().lower(),
        )
        results = run_benchmarks(names, context)
    except (ConfigError, ValidationError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1)
    except BenchmarkBatchError as exc:
        if exc.results:
            _render_results(exc.results)
        logger.error("%s", exc)
        raise typer.Exit(code=1)
    _render_results(results)
