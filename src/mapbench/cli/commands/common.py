"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/cli/commands/common.py
--------------------------------------------------------------------------------
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from mapbench.config.load import CONFIG_ENV_VAR, DEFAULT_CONFIG_NAME, load_config
from mapbench.config.schema import SuiteConfig
from mapbench.errors import ConfigError

console = Console()

CONFIG_OPTION = typer.Option(
    Path(DEFAULT_CONFIG_NAME),
    "--config",
    "-c",
    envvar=CONFIG_ENV_VAR,
    help="Path to the benchmark suite config (YAML).",
)


def load_config_or_exit(path: Path) -> SuiteConfig:
    try:
        return load_config(path)
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1)
