"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/benchmarks/sweep.py

Sequential floxer sweeps and the batch runner for named benchmarks.

A sweep writes every instance into one fresh BenchmarkFolder, persists a
manifest after each instance, writes a summary table and, if every instance
succeeded and at least one actually executed, moves the ``most_recent``
alias to the new folder. Replayed instances appear in the new folder as
symlinks to the directories they were read from.
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, Literal, Mapping, Optional, Sequence

import pandas as pd

from mapbench.analysis.mapped_reads import MappedReadsStats
from mapbench.artifacts.atomic_write import atomic_write_parquet, atomic_write_text
from mapbench.artifacts.layout import BenchmarkFolder
from mapbench.benchmarks.manifest import (
    SweepInstanceRun,
    SweepManifestV1,
    load_sweep_manifest,
    mark_pending_as_skipped,
    utc_now_iso,
    write_sweep_manifest,
)
from mapbench.config.schema import SuiteConfig
from mapbench.core.params import BenchmarkConfig, FloxerConfig, ProfileConfig
from mapbench.errors import BenchmarkBatchError, ConfigError
from mapbench.parsers.comparison import DetailedMappedReadsComparison
from mapbench.readmappers.floxer import FloxerRunResult, run_floxer
from mapbench.readmappers.minimap import MinimapRunResult

logger = logging.getLogger(__name__)

OnInstanceError = Literal["abort", "continue"]
SUMMARY_TABLE_KEY = "summary"

SUMMARY_COLUMNS = [
    "instance",
    "reused",
    "wall_clock_seconds",
    "user_cpu_seconds",
    "system_cpu_seconds",
    "cpu_seconds",
    "peak_memory_kilobytes",
    "average_memory_kilobytes",
    "num_mapped",
    "num_unmapped",
    "num_multi_mapped",
    "mean_primary_edit_distance",
    "completely_excluded_queries",
]


@dataclass(frozen=True)
class InstanceFailure:
    instance_name: str
    message: str


@dataclass
class BenchmarkContext:
    """Everything a named benchmark needs besides its own instance configs."""

    suite_config: SuiteConfig
    benchmark_config: BenchmarkConfig = field(default_factory=BenchmarkConfig)
    profile: ProfileConfig = ProfileConfig.OFF
    on_instance_error: OnInstanceError = "abort"
    table_format: str = "csv"
    clock: Callable[[], datetime] = datetime.now
    _sweep_counter: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.on_instance_error not in ("abort", "continue"):
            raise ConfigError(f"on_instance_error must be 'abort' or 'continue', got {self.on_instance_error!r}")
        if self.table_format not in ("csv", "parquet"):
            raise ConfigError(f"table_format must be 'csv' or 'parquet', got {self.table_format!r}")

    def next_sweep_name(self, prefix: str = "unnamed_benchmark") -> str:
        name = f"{prefix}_{self._sweep_counter}"
        self._sweep_counter += 1
        return name

    def floxer_config(self, **changes: Any) -> FloxerConfig:
        return FloxerConfig.from_benchmark_config(self.benchmark_config, **changes)


def _summary_row(result: FloxerRunResult) -> dict[str, Any]:
    metrics = result.resource_metrics
    reads: MappedReadsStats = result.mapped_read_stats
    return {
        "instance": result.benchmark_instance_name,
        "reused": result.reused,
        "wall_clock_seconds": metrics.wall_clock_seconds,
        "user_cpu_seconds": metrics.user_cpu_seconds,
        "system_cpu_seconds": metrics.system_cpu_seconds,
        "cpu_seconds": metrics.cpu_seconds,
        "peak_memory_kilobytes": metrics.peak_memory_kilobytes,
        "average_memory_kilobytes": metrics.average_memory_kilobytes,
        "num_mapped": reads.num_mapped,
        "num_unmapped": reads.num_unmapped,
        "num_multi_mapped": reads.num_multi_mapped,
        "mean_primary_edit_distance": reads.mean_primary_edit_distance,
        "completely_excluded_queries": result.stats.completely_excluded_queries,
    }


@dataclass
class SweepResult:
    name: str
    benchmark_folder: BenchmarkFolder
    floxer_results: list[FloxerRunResult] = field(default_factory=list)
    failures: list[InstanceFailure] = field(default_factory=list)
    summary_path: Optional[Path] = None
    most_recent_link_updated: bool = False
    minimap_result: Optional[MinimapRunResult] = None
    comparison: Optional[DetailedMappedReadsComparison] = None

    @property
    def succeeded(self) -> bool:
        return not self.failures

    @property
    def num_executed(self) -> int:
        return sum(1 for result in self.floxer_results if not result.reused)

    def summary_frame(self) -> pd.DataFrame:
        return pd.DataFrame([_summary_row(result) for result in self.floxer_results], columns=SUMMARY_COLUMNS)


def write_summary_table(result: SweepResult, *, table_format: str = "csv") -> Path:
    path = result.benchmark_folder.table_path(SUMMARY_TABLE_KEY, table_format)
    df = result.summary_frame()
    if table_format == "parquet":
        atomic_write_parquet(df, path)
    else:
        atomic_write_text(path, df.to_csv(index=False))
    return path


def _check_unique_names(configs: Sequence[FloxerConfig]) -> None:
    seen: set[str] = set()
    for config in configs:
        if config.name in seen:
            raise ConfigError(f"Duplicate instance name in sweep: {config.name!r}")
        seen.add(config.name)


def run_floxer_sweep(
    name: Optional[str],
    configs: Iterable[FloxerConfig],
    context: BenchmarkContext,
    *,
    update_link: bool = True,
) -> SweepResult:
    """Run ``configs`` one after another into a fresh benchmark folder.

    Replayed instances are linked into the new folder so it stays complete once
    ``most_recent`` points at it. With ``update_link=False`` the caller decides
    when to promote the folder (see ``promote_to_most_recent``).
    """
    configs = list(configs)
    _check_unique_names(configs)
    sweep_name = name if name is not None else context.next_sweep_name()
    suite_config = context.suite_config
    bc = context.benchmark_config
    folder = BenchmarkFolder.create_new(suite_config.output_folder, sweep_name, bc, now=context.clock())
    result = SweepResult(name=sweep_name, benchmark_folder=folder)

    manifest = SweepManifestV1(
        sweep_name=sweep_name,
        reference=str(bc.reference),
        queries=str(bc.queries),
        tag=bc.tag,
        only_analysis=bc.only_analysis,
        profile=context.profile is ProfileConfig.ON,
        on_instance_error=context.on_instance_error,
        instances=[SweepInstanceRun(name=c.name, config=c.model_dump(mode="json")) for c in configs],
    )
    manifest_path = folder.manifest_path()
    logger.info("Sweep %s: %d instance(s) into %s", sweep_name, len(configs), folder.path)

    for config, run in zip(configs, manifest.instances):
        run.status = "running"
        run.started_at = utc_now_iso()
        write_sweep_manifest(manifest_path, manifest)
        try:
            instance_result = run_floxer(config, folder, sweep_name, suite_config, context.profile)
        except Exception as exc:
            run.status = "error"
            run.error = str(exc)
            run.finished_at = utc_now_iso()
            result.failures.append(InstanceFailure(instance_name=config.name, message=str(exc)))
            logger.error("Instance %s failed: %s", config.full_name(sweep_name), exc)
            if context.on_instance_error == "abort":
                mark_pending_as_skipped(manifest, reason="Skipped because the sweep aborted after an earlier error.")
                manifest.finished_at = utc_now_iso()
                write_sweep_manifest(manifest_path, manifest)
                raise
        else:
            run.status = "reused" if instance_result.reused else "success"
            instance_dir = instance_result.instance_folder.path
            if instance_result.reused:
                instance_dir = folder.link_instance(instance_result.instance_folder).path
            run.instance_dir = str(instance_dir)
            run.finished_at = utc_now_iso()
            result.floxer_results.append(instance_result)
        write_sweep_manifest(manifest_path, manifest)

    if result.floxer_results:
        result.summary_path = write_summary_table(result, table_format=context.table_format)
        logger.info("Wrote sweep summary to %s", result.summary_path)

    logger.info(
        "Sweep %s finished: %d success, %d reused, %d error",
        sweep_name,
        manifest.count("success"),
        manifest.count("reused"),
        manifest.count("error"),
    )
    manifest.finished_at = utc_now_iso()
    write_sweep_manifest(manifest_path, manifest)

    if result.failures:
        logger.warning("Sweep %s had %d failure(s); most_recent link left unchanged", sweep_name, len(result.failures))
    elif update_link and result.num_executed > 0:
        promote_to_most_recent(result)
    return result


def promote_to_most_recent(result: SweepResult) -> None:
    """Move the ``most_recent`` alias to a finished sweep and record it in its manifest."""
    folder = result.benchmark_folder
    folder.update_most_recent_link()
    result.most_recent_link_updated = True
    manifest_path = folder.manifest_path()
    if manifest_path.exists():
        manifest = load_sweep_manifest(manifest_path)
        manifest.most_recent_link_updated = True
        write_sweep_manifest(manifest_path, manifest)
    logger.info("Updated %s -> %s", folder.most_recent_link(), folder.path.name)


BenchmarkFn = Callable[[BenchmarkContext], SweepResult]


def run_benchmarks(
    names: Sequence[str],
    context: BenchmarkContext,
    *,
    registry: Optional[Mapping[str, BenchmarkFn]] = None,
) -> list[SweepResult]:
    """Run named benchmarks in order; raise BenchmarkBatchError at the end if any failed."""
    if registry is None:
        from mapbench.benchmarks.catalog import BENCHMARKS

        registry = BENCHMARKS
    unknown = [name for name in names if name not in registry]
    if unknown:
        raise ConfigError(f"Unknown benchmark(s): {', '.join(unknown)}. Available: {', '.join(registry)}")

    context.suite_config.setup()
    results: list[SweepResult] = []
    failed: list[str] = []
    for name in names:
        logger.info("Running benchmark %s", name)
        try:
            result = registry[name](context)
        except Exception as exc:
            logger.error("Benchmark %s failed: %s", name, exc)
            logger.debug("Benchmark %s traceback", name, exc_info=True)
            failed.append(name)
            continue
        results.append(result)
        if not result.succeeded:
            failed.append(name)

    if failed:
        raise BenchmarkBatchError(len(failed), failed, results=results)
    return results
