"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/readmappers/process.py

Command wrapping (GNU time, perf) and subprocess execution with failure
classification. Command construction is pure; only ``run_command`` touches
the system.
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Sequence

from mapbench.errors import ProcessFailedError
from mapbench.parsers.timing import TIME_TOOL_FORMAT

logger = logging.getLogger(__name__)

PERF_SAMPLING_FREQUENCY = 100
PERF_CALL_GRAPH = "dwarf,16384"

Command = Sequence[str | Path]


def as_argv(command: Command) -> list[str]:
    return [str(part) for part in command]


def wrap_with_time(command: Command, *, timing_path: Path, time_binary: Path) -> list[str]:
    return [
        str(time_binary),
        "--output",
        str(timing_path),
        "--format",
        TIME_TOOL_FORMAT,
        *as_argv(command),
    ]


def wrap_with_perf(command: Command, *, perf_data_path: Path, perf_binary: Path) -> list[str]:
    return [
        str(perf_binary),
        "record",
        "-o",
        str(perf_data_path),
        "-F",
        str(PERF_SAMPLING_FREQUENCY),
        "--call-graph",
        PERF_CALL_GRAPH,
        "-g",  # user and kernel space
        "--",
        *as_argv(command),
    ]


def run_command(command: Command, *, timeout: float | None = None) -> subprocess.CompletedProcess[str]:
    argv = as_argv(command)
    logger.debug("+ %s", " ".join(argv))
    try:
        return subprocess.run(
            argv,
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise ProcessFailedError(
            f"{Path(argv[0]).name} did not finish within {timeout} seconds",
            command=argv,
            returncode=None,
            stdout=_decode(exc.stdout),
            stderr=_decode(exc.stderr),
        ) from exc
    except FileNotFoundError as exc:
        raise ProcessFailedError(
            f"executable not found: {argv[0]}",
            command=argv,
            returncode=None,
        ) from exc


def _decode(value: bytes | str | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def run_checked(
    command: Command,
    *,
    what: str,
    require_empty_stdout: bool = False,
    timeout: float | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run ``command``; raise ProcessFailedError on a non-zero exit or, if requested, any stdout."""
    result = run_command(command, timeout=timeout)
    if result.returncode != 0:
        raise ProcessFailedError(
            f"{what} exited with code {result.returncode}",
            command=as_argv(command),
            returncode=result.returncode,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
        )
    # the tool under test is silent on success; stdout means something went wrong
    if require_empty_stdout and result.stdout:
        raise ProcessFailedError(
            f"{what} wrote unexpected output to stdout",
            command=as_argv(command),
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr or "",
        )
    return result
