"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/errors.py

Exception taxonomy shared by runners, parsers and the sweep orchestration.
Filesystem failures are left as OSError.
--------------------------------------------------------------------------------
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence


class MapbenchError(Exception):
    """Base class for all harness errors."""


class ConfigError(MapbenchError, ValueError):
    """Invalid suite configuration or dataset selection."""


class ProcessFailedError(MapbenchError, RuntimeError):
    """An external binary exited unsuccessfully or broke its output contract."""

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str],
        returncode: int | None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.command = [str(part) for part in command]
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(message)

    def __str__(self) -> str:
        base = super().__str__()
        stdout = self.stdout.strip() or "(no stdout)"
        stderr = self.stderr.strip() or "(no stderr)"
        return (
            f"{base}\ncommand: {' '.join(self.command)}\nexit code: {self.returncode}\n"
            f"stdout:\n{stdout}\nstderr:\n{stderr}"
        )


class ArtifactParseError(MapbenchError, ValueError):
    """A timing, stats or comparison artifact is missing or malformed."""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        self.path = path
        if path is not None:
            message = f"{message} ({path})"
        super().__init__(message)


class RecordContractError(MapbenchError, RuntimeError):
    """An alignment record violates the output contract of the aligner under test."""


class BenchmarkBatchError(MapbenchError, RuntimeError):
    def __init__(self, num_failed: int, failed: Sequence[str] = (), *, results: Sequence[Any] = ()) -> None:
        self.num_failed = num_failed
        self.failed = list(failed)
        self.results = list(results)
        names = f": {', '.join(self.failed)}" if self.failed else ""
        super().__init__(f"errors occurred in {num_failed} benchmark(s){names}")
