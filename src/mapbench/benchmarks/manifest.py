"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/benchmarks/manifest.py

Sweep manifest models with atomic persistence helpers. The manifest is
rewritten after every instance so an interrupted sweep still shows what ran.
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from mapbench.artifacts.atomic_write import atomic_write_json

InstanceStatus = Literal["pending", "running", "success", "reused", "error", "skipped"]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class _ManifestModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class SweepInstanceRun(_ManifestModel):
    name: str
    config: dict[str, Any] = Field(default_factory=dict)
    status: InstanceStatus = "pending"
    instance_dir: Optional[str] = None
    error: Optional[str] = None
    started_at: Optional[str] = None
    finished_at: Optional[str] = None


class SweepManifestV1(_ManifestModel):
    schema_version: int = 1
    sweep_name: str
    reference: str
    queries: str
    tag: Optional[str] = None
    only_analysis: bool = False
    profile: bool = False
    on_instance_error: Literal["abort", "continue"] = "abort"
    created_at: str = Field(default_factory=utc_now_iso)
    finished_at: Optional[str] = None
    most_recent_link_updated: bool = False
    instances: list[SweepInstanceRun] = Field(default_factory=list)

    def count(self, status: InstanceStatus) -> int:
        return sum(1 for run in self.instances if run.status == status)


def mark_pending_as_skipped(manifest: SweepManifestV1, *, reason: str) -> None:
    for run in manifest.instances:
        if run.status == "pending":
            run.status = "skipped"
            run.error = reason


def write_sweep_manifest(path: Path, manifest: SweepManifestV1) -> None:
    atomic_write_json(path, manifest.model_dump(mode="json"))


def load_sweep_manifest(path: Path) -> SweepManifestV1:
    if not path.exists():
        raise FileNotFoundError(f"Sweep manifest not found: {path}")
    return SweepManifestV1.model_validate(json.loads(path.read_text()))
