"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/readmappers/minimap.py

Reference aligner runs (minimap2): optional index build, then mapping, both
timed with GNU time.
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from mapbench.analysis.mapped_reads import MappedReadsStats, analyze_mapped_reads
from mapbench.artifacts.layout import BenchmarkFolder, InstanceFolder
from mapbench.config.schema import SuiteConfig
from mapbench.core.datasets import Queries, Reference
from mapbench.core.params import IndexStrategy, MinimapConfig
from mapbench.parsers.timing import ResourceMetrics, parse_resource_metrics
from mapbench.readmappers import process

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MinimapRunResult:
    map_resource_metrics: ResourceMetrics
    index_resource_metrics: Optional[ResourceMetrics]
    mapped_read_stats: MappedReadsStats
    instance_folder: InstanceFolder


def minimap_index_path(suite_config: SuiteConfig, reference: Reference, queries: Queries) -> Path:
    return suite_config.index_folder() / f"minimap-index-{reference}-{queries}.mmi"


def build_minimap_index_command(
    *,
    binary: Path,
    preset: str,
    index_path: Path,
    reference_path: Path,
    num_threads: int,
) -> list[str]:
    return [str(binary), "-x", preset, "-d", str(index_path), str(reference_path), "-t", str(num_threads)]


def build_minimap_map_command(
    *,
    binary: Path,
    index_path: Path,
    queries_path: Path,
    num_threads: int,
    output_path: Path,
) -> list[str]:
    return [str(binary), "-a", str(index_path), str(queries_path), "-t", str(num_threads), "-o", str(output_path)]


def needs_index_build(config: MinimapConfig, index_path: Path) -> bool:
    return config.index_strategy is IndexStrategy.ALWAYS_REBUILD or not index_path.exists()


def run_minimap(
    config: MinimapConfig,
    benchmark_folder: BenchmarkFolder,
    suite_config: SuiteConfig,
) -> MinimapRunResult:
    instance = benchmark_folder.instance(config.name).create()
    binary = suite_config.readmapper_binaries.minimap
    timeout = suite_config.process_timeout_seconds
    index_path = minimap_index_path(suite_config, config.reference, config.queries)

    logger.info("Running minimap for reference %s and queries %s", config.reference, config.queries)

    index_metrics: Optional[ResourceMetrics] = None
    if needs_index_build(config, index_path):
        index_path.parent.mkdir(parents=True, exist_ok=True)
        index_cmd = build_minimap_index_command(
            binary=binary,
            preset=config.queries.minimap_preset,
            index_path=index_path,
            reference_path=suite_config.reference_path(config.reference),
            num_threads=config.num_threads,
        )
        process.run_checked(
            process.wrap_with_time(index_cmd, timing_path=instance.index_timing_path, time_binary=suite_config.tools.time),
            what="minimap indexing",
            timeout=timeout,
        )
        index_metrics = parse_resource_metrics(instance.index_timing_path)
    else:
        logger.info("Using stored minimap index %s", index_path)

    map_cmd = build_minimap_map_command(
        binary=binary,
        index_path=index_path,
        queries_path=suite_config.queries_path(config.queries),
        num_threads=config.num_threads,
        output_path=instance.mapped_reads_sam_path,
    )
    process.run_checked(
        process.wrap_with_time(map_cmd, timing_path=instance.timing_path, time_binary=suite_config.tools.time),
        what="minimap mapping",
        timeout=timeout,
    )

    return MinimapRunResult(
        map_resource_metrics=parse_resource_metrics(instance.timing_path),
        index_resource_metrics=index_metrics,
        mapped_read_stats=analyze_mapped_reads(instance.mapped_reads_sam_path, allow_supplementary=True),
        instance_folder=instance,
    )
