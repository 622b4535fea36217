"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/cli/app.py
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import typer

from mapbench.cli.commands.compare import compare as compare_cmd
from mapbench.cli.commands.doctor import doctor as doctor_cmd
from mapbench.cli.commands.list_benchmarks import list_benchmarks as list_cmd
from mapbench.cli.commands.run import run as run_cmd
from mapbench.utils.logging import configure_logging

app = typer.Typer(
    no_args_is_help=True,
    help="Benchmark the floxer long-read aligner against minimap2.",
)
app.info.epilog = "Tip: run `mapbench <command> --help` for details."


@app.callback()
def main(
    log_level: str = typer.Option(
        "INFO",
        "--log-level",
        envvar="MAPBENCH_LOG_LEVEL",
        help="Logging level (e.g., DEBUG, INFO, WARNING).",
    ),
) -> None:
    """Benchmark the floxer long-read aligner against minimap2."""
    configure_logging(log_level)


app.command(
    "run",
    help="Run named benchmarks (all of them if none are given).",
    short_help="Run benchmarks.",
)(run_cmd)
app.command(
    "list",
    help="List the available benchmarks.",
    short_help="List benchmarks.",
)(list_cmd)
app.command(
    "doctor",
    help="Check that the configured binaries and datasets are available.",
    short_help="Check dependencies.",
)(doctor_cmd)
app.command(
    "compare",
    help="Compare floxer and minimap2 output with compare_aligner_outputs.",
    short_help="Compare aligner outputs.",
)(compare_cmd)

if __name__ == "__main__":
    app()
