"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/cli/commands/doctor.py
--------------------------------------------------------------------------------
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table

from mapbench.cli.commands.common import CONFIG_OPTION, console, load_config_or_exit
from mapbench.integrations.tools import check_dataset_paths, check_suite_tools


def doctor(
    config: Path = CONFIG_OPTION,
    profile: bool = typer.Option(False, "--profile", help="Treat profiling tools (perf, flamegraph) as required."),
) -> None:
    cfg = load_config_or_exit(config)
    console.print(f"Config: {config}")

    ok, statuses = check_suite_tools(cfg, profile=profile)
    table = Table(title="External tools", header_style="bold")
    table.add_column("Tool")
    table.add_column("Status")
    table.add_column("Required")
    table.add_column("Path")
    table.add_column("Hint")
    for status in statuses:
        table.add_row(status.tool, status.status, "yes" if status.required else "no", status.path, status.hint)
    console.print(table)

    datasets = check_dataset_paths(cfg)
    if datasets:
        data_table = Table(title="Datasets", header_style="bold")
        data_table.add_column("Dataset")
        data_table.add_column("Status")
        data_table.add_column("Path")
        for row in datasets:
            data_table.add_row(*row)
        console.print(data_table)
    else:
        console.print("No dataset paths configured.")

    if not ok:
        raise typer.Exit(code=1)
