"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/cli/commands/list_benchmarks.py
--------------------------------------------------------------------------------
"""

from __future__ import annotations

from rich.table import Table

from mapbench.benchmarks.catalog import BENCHMARKS, describe
from mapbench.cli.commands.common import console


def list_benchmarks() -> None:
    table = Table(title="Benchmarks", header_style="bold")
    table.add_column("Name")
    table.add_column("Description")
    for name in BENCHMARKS:
        table.add_row(name, describe(name))
    console.print(table)
