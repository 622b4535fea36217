"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/artifacts/layout.py

Path layout for benchmark artifacts.

<output_folder>/<benchmark>/<queries>_in_<reference>/<timestamp>[_<tag>]/<instance>/...
<output_folder>/<benchmark>/<queries>_in_<reference>/most_recent -> <timestamp>[_<tag>]

Paths are computed, never created eagerly, except by BenchmarkFolder.create_new.
Other directories appear on the first artifact write (InstanceFolder.create
or an atomic write).
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from mapbench.artifacts.atomic_write import atomic_replace_symlink
from mapbench.core.datasets import dataset_tag
from mapbench.core.params import BenchmarkConfig

TIMESTAMP_FORMAT = "%Y-%m-%d--%H-%M-%S"
MOST_RECENT_LINK_NAME = "most_recent"
PLOTS_DIR = "plots"
TABLE_FILE_PREFIX = "table__"
COMPARISON_FILE_STEM = "detailed_aligner_comparison"

_BENCHMARK_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


def _check_name(name: str, *, label: str) -> str:
    text = str(name).strip()
    if not _BENCHMARK_NAME_RE.match(text):
        raise ValueError(f"{label} must be a folder-safe name: {name!r}")
    if text == MOST_RECENT_LINK_NAME:
        raise ValueError(f"{label} must not be '{MOST_RECENT_LINK_NAME}'")
    return text


def benchmark_root(output_folder: Path, benchmark_name: str, benchmark_config: BenchmarkConfig) -> Path:
    name = _check_name(benchmark_name, label="benchmark name")
    return output_folder / name / dataset_tag(benchmark_config.reference, benchmark_config.queries)


def most_recent_link(output_folder: Path, benchmark_name: str, benchmark_config: BenchmarkConfig) -> Path:
    return benchmark_root(output_folder, benchmark_name, benchmark_config) / MOST_RECENT_LINK_NAME


@dataclass(frozen=True)
class InstanceFolder:
    path: Path

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def mapped_reads_bam_path(self) -> Path:
        return self.path / "mapped_reads.bam"

    @property
    def mapped_reads_sam_path(self) -> Path:
        return self.path / "mapped_reads.sam"

    @property
    def logfile_path(self) -> Path:
        return self.path / "log.txt"

    @property
    def timing_path(self) -> Path:
        return self.path / "timing.toml"

    @property
    def index_timing_path(self) -> Path:
        return self.path / "index_timing.toml"

    @property
    def stats_path(self) -> Path:
        return self.path / "stats.toml"

    @property
    def perf_data_path(self) -> Path:
        return self.path / "perf.data"

    @property
    def samply_profile_path(self) -> Path:
        return self.path / "samply_profile.json"

    @property
    def flamegraph_path(self) -> Path:
        return self.path / "flamegraph.svg"

    def exists(self) -> bool:
        return self.path.is_dir()

    def create(self) -> "InstanceFolder":
        self.path.mkdir(parents=True, exist_ok=True)
        return self


@dataclass(frozen=True)
class BenchmarkFolder:
    path: Path

    @classmethod
    def new(
        cls,
        output_folder: Path,
        benchmark_name: str,
        benchmark_config: BenchmarkConfig,
        *,
        now: datetime | None = None,
    ) -> "BenchmarkFolder":
        stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
        if benchmark_config.tag:
            stamp = f"{stamp}_{benchmark_config.tag}"
        return cls(benchmark_root(output_folder, benchmark_name, benchmark_config) / stamp)

    @classmethod
    def create_new(
        cls,
        output_folder: Path,
        benchmark_name: str,
        benchmark_config: BenchmarkConfig,
        *,
        now: datetime | None = None,
    ) -> "BenchmarkFolder":
        """Create a fresh folder; a name already taken (same second) gets a numeric suffix."""
        base = cls.new(output_folder, benchmark_name, benchmark_config, now=now).path
        base.parent.mkdir(parents=True, exist_ok=True)
        candidate = base
        suffix = 0
        while True:
            try:
                candidate.mkdir(exist_ok=False)
            except FileExistsError:
                suffix += 1
                candidate = base.with_name(f"{base.name}_{suffix}")
                continue
            return cls(candidate)

    def plot_folder(self) -> Path:
        return self.path / PLOTS_DIR

    def most_recent_link(self) -> Path:
        return self.path.parent / MOST_RECENT_LINK_NAME

    def update_most_recent_link(self) -> Path:
        """Point the sibling ``most_recent`` alias at this folder."""
        link = self.most_recent_link()
        if not self.path.is_dir():
            raise FileNotFoundError(f"Cannot link to missing benchmark folder: {self.path}")
        atomic_replace_symlink(link, self.path.name)
        return link

    def instance(self, instance_name: str) -> InstanceFolder:
        return InstanceFolder(self.path / _check_name(instance_name, label="instance name"))

    def most_recent_instance(self, instance_name: str) -> InstanceFolder:
        return InstanceFolder(self.most_recent_link() / _check_name(instance_name, label="instance name"))

    def link_instance(self, previous: InstanceFolder) -> InstanceFolder:
        """Expose a replayed instance inside this folder as a symlink to its real directory."""
        target = previous.path.resolve()
        if not target.is_dir():
            raise FileNotFoundError(f"Cannot link to missing instance folder: {previous.path}")
        link = self.instance(target.name)
        self.path.mkdir(parents=True, exist_ok=True)
        os.symlink(os.path.relpath(target, self.path), link.path, target_is_directory=True)
        return link

    def comparison_path(self) -> Path:
        return self.path / f"{COMPARISON_FILE_STEM}.toml"

    def manifest_path(self) -> Path:
        return self.path / "sweep_manifest.json"

    def table_path(self, key: str, table_format: str = "csv") -> Path:
        name = str(key).strip()
        if not name:
            raise ValueError("table key must be non-empty")
        ext = str(table_format).strip().lstrip(".").lower()
        if ext not in {"csv", "parquet"}:
            raise ValueError(f"Unsupported table format: {table_format!r}")
        return self.path / f"{TABLE_FILE_PREFIX}{name}.{ext}"
