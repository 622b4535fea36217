"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/integrations/tools.py

Availability checks for the external binaries a benchmark suite depends on.
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from pathlib import Path

from mapbench.config.schema import SuiteConfig


@dataclass(frozen=True)
class ToolStatus:
    tool: str
    status: str
    path: str
    required: bool
    hint: str


def resolve_executable(path: Path) -> Path | None:
    candidate = path.expanduser()
    if len(candidate.parts) == 1 and not candidate.exists():
        found = shutil.which(str(candidate))
        return Path(found) if found else None
    if candidate.is_file() and os.access(candidate, os.X_OK):
        return candidate
    return None


def _check(tool: str, path: Path | None, *, required: bool, hint: str) -> ToolStatus:
    if path is None:
        return ToolStatus(tool=tool, status="not configured", path="-", required=required, hint=hint)
    exe = resolve_executable(path)
    if exe is None:
        return ToolStatus(tool=tool, status="missing", path=str(path), required=required, hint=hint)
    return ToolStatus(tool=tool, status="ok", path=str(exe), required=required, hint="-")


def check_suite_tools(cfg: SuiteConfig, *, profile: bool = False) -> tuple[bool, list[ToolStatus]]:
    """Check every configured binary; ``ok`` is False if a required one is unusable."""
    tools = cfg.tools
    statuses = [
        _check("floxer", cfg.readmapper_binaries.floxer, required=True, hint="Set readmapper_binaries.floxer."),
        _check("minimap2", cfg.readmapper_binaries.minimap, required=True, hint="Set readmapper_binaries.minimap."),
        _check("time", tools.time, required=True, hint="Install GNU time or set tools.time."),
        _check(
            "compare_aligner_outputs",
            cfg.compare_aligner_outputs_binary,
            required=False,
            hint="Needed by floxer_vs_minimap and `mapbench compare`.",
        ),
        _check(
            "simulated_dataset",
            cfg.simulated_dataset_binary,
            required=False,
            hint="Needed to verify runs on the simulated dataset.",
        ),
        _check("perf", tools.perf, required=profile, hint="Needed for --profile."),
        _check("flamegraph", tools.flamegraph, required=profile, hint="Needed for --profile."),
        _check("samply", tools.samply, required=False, hint="Optional; enables samply profiles with --profile."),
    ]
    ok = all(status.status == "ok" for status in statuses if status.required)
    return ok, statuses


def check_dataset_paths(cfg: SuiteConfig) -> list[tuple[str, str, str]]:
    """(kind.name, status, path) for every configured dataset path."""
    rows: list[tuple[str, str, str]] = []
    for kind, paths in (("reference", cfg.reference_paths), ("queries", cfg.query_paths)):
        for name, path in paths.model_dump().items():
            if path is None:
                continue
            status = "ok" if Path(path).exists() else "missing"
            rows.append((f"{kind}.{name}", status, str(path)))
    return rows
