"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/readmappers/floxer.py

Runs one floxer benchmark instance: translate the configuration into a
command line, execute it under GNU time (and perf when profiling), then parse
the timing, stats and mapped-reads artifacts.

With ``only_analysis`` the artifacts of the most recent run are replayed
instead of executing floxer again.
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from mapbench.analysis.mapped_reads import MappedReadsStats, analyze_mapped_reads
from mapbench.analysis.simulated import verify_simulated_dataset
from mapbench.artifacts.layout import BenchmarkFolder, InstanceFolder
from mapbench.config.schema import SuiteConfig
from mapbench.core.datasets import Queries, Reference
from mapbench.core.params import (
    CigarOutput,
    ErrorRate,
    ExactErrors,
    FloxerConfig,
    IndexStrategy,
    IntervalOptimization,
    PexTreeConstruction,
    ProfileConfig,
    VerificationAlgorithm,
    format_float,
)
from mapbench.parsers.stats import FloxerStats, parse_floxer_stats
from mapbench.parsers.timing import ResourceMetrics, parse_resource_metrics
from mapbench.readmappers import process

logger = logging.getLogger(__name__)

SAMPLY_PROFILE_NAME = "floxer_profile"


@dataclass(frozen=True)
class FloxerRunResult:
    benchmark_instance_name: str
    stats: FloxerStats
    resource_metrics: ResourceMetrics
    mapped_read_stats: MappedReadsStats
    instance_folder: InstanceFolder
    reused: bool = False


def floxer_index_path(suite_config: SuiteConfig, reference: Reference) -> Path:
    return suite_config.index_folder() / f"floxer-index-{reference}.flxi"


def build_floxer_command(
    config: FloxerConfig,
    *,
    binary: Path,
    reference_path: Path,
    queries_path: Path,
    instance: InstanceFolder,
    index_path: Path | None,
) -> list[str]:
    algo = config.algorithm_config
    cmd: list[str] = [
        str(binary),
        "--reference",
        str(reference_path),
        "--queries",
        str(queries_path),
        "--output",
        str(instance.mapped_reads_bam_path),
        "--logfile",
        str(instance.logfile_path),
        "--stats",
        str(instance.stats_path),
    ]

    if algo.index_strategy is IndexStrategy.READ_FROM_DISK_IF_STORED:
        if index_path is None:
            raise ValueError("index_path is required for index_strategy=read_from_disk_if_stored")
        cmd += ["--index", str(index_path)]

    query_errors = algo.query_errors
    if isinstance(query_errors, ExactErrors):
        cmd += ["--query-errors", str(query_errors.count)]
    elif isinstance(query_errors, ErrorRate):
        cmd += ["--error-probability", format_float(query_errors.rate)]
    else:
        raise TypeError(f"Unsupported query error variant: {query_errors!r}")

    cmd += [
        "--seed-errors",
        str(algo.pex_seed_errors),
        "--max-anchors-hard",
        str(algo.max_num_anchors_hard),
        "--max-anchors-soft",
        str(algo.max_num_anchors_soft),
        "--anchor-group-order",
        str(algo.anchor_group_order),
        "--anchor-choice-strategy",
        str(algo.anchor_choice_strategy),
        "--seed-sampling-step-size",
        str(algo.seed_sampling_step_size),
        "--extra-verification-ratio",
        format_float(algo.extra_verification_ratio),
        "--threads",
        str(algo.num_threads),
        "--num-anchors-per-task",
        str(algo.num_anchors_per_verification_task),
    ]

    if algo.pex_tree_construction is PexTreeConstruction.BOTTOM_UP:
        cmd.append("--bottom-up-pex-tree")
    if algo.interval_optimization is IntervalOptimization.ON:
        cmd.append("--interval-optimization")
    if algo.verification_algorithm is VerificationAlgorithm.DIRECT_FULL:
        cmd.append("--direct-full-verification")
    hint = config.queries.floxer_stats_input_hint
    if hint is not None:
        cmd += ["--stats-input-hint", str(hint)]
    if config.cigar_output is CigarOutput.OFF:
        cmd.append("--without-cigar")
    return cmd


def build_flamegraph_command(instance: InstanceFolder, *, flamegraph_binary: Path) -> list[str]:
    return [
        str(flamegraph_binary),
        "--deterministic",
        "--perfdata",
        str(instance.perf_data_path),
        "--output",
        str(instance.flamegraph_path),
    ]


def build_samply_import_command(instance: InstanceFolder, *, samply_binary: Path) -> list[str]:
    return [
        str(samply_binary),
        "import",
        "--profile-name",
        SAMPLY_PROFILE_NAME,
        "--save-only",
        "--output",
        str(instance.samply_profile_path),
        "--no-open",
        str(instance.perf_data_path),
    ]


def create_profile(instance: InstanceFolder, suite_config: SuiteConfig) -> None:
    tools = suite_config.tools
    timeout = suite_config.process_timeout_seconds
    if tools.samply is not None:
        process.run_checked(
            build_samply_import_command(instance, samply_binary=tools.samply),
            what="samply import",
            timeout=timeout,
        )
    process.run_checked(
        build_flamegraph_command(instance, flamegraph_binary=tools.flamegraph),
        what="flamegraph generation",
        timeout=timeout,
    )
    logger.info("Wrote flamegraph to %s", instance.flamegraph_path)


def _execute(
    config: FloxerConfig,
    instance: InstanceFolder,
    benchmark_name: str,
    suite_config: SuiteConfig,
    profile: ProfileConfig,
) -> None:
    algo = config.algorithm_config
    index_path = None
    if algo.index_strategy is IndexStrategy.READ_FROM_DISK_IF_STORED:
        index_path = floxer_index_path(suite_config, config.reference)

    command = build_floxer_command(
        config,
        binary=suite_config.readmapper_binaries.floxer,
        reference_path=suite_config.reference_path(config.reference),
        queries_path=suite_config.queries_path(config.queries),
        instance=instance,
        index_path=index_path,
    )
    command = process.wrap_with_time(
        command,
        timing_path=instance.timing_path,
        time_binary=suite_config.tools.time,
    )
    if profile is ProfileConfig.ON:
        command = process.wrap_with_perf(
            command,
            perf_data_path=instance.perf_data_path,
            perf_binary=suite_config.tools.perf,
        )

    instance.create()
    logger.info("Running the benchmark: %s", config.full_name(benchmark_name))
    process.run_checked(
        command,
        what="floxer",
        require_empty_stdout=profile is ProfileConfig.OFF,
        timeout=suite_config.process_timeout_seconds,
    )


def run_floxer(
    config: FloxerConfig,
    benchmark_folder: BenchmarkFolder,
    benchmark_name: str,
    suite_config: SuiteConfig,
    profile: ProfileConfig = ProfileConfig.OFF,
) -> FloxerRunResult:
    """Run (or replay) one instance and parse its artifacts.

    The most-recent link is left alone; the sweep updates it once all of its
    instances are done.
    """
    previous = benchmark_folder.most_recent_instance(config.name)
    reused = config.only_analysis and previous.exists()
    if reused:
        instance = previous
        logger.info("Reusing previous results of %s from %s", config.full_name(benchmark_name), instance.path)
    else:
        if config.only_analysis:
            logger.warning(
                "No previous run of %s found, running it now",
                config.full_name(benchmark_name),
            )
        instance = benchmark_folder.instance(config.name)
        _execute(config, instance, benchmark_name, suite_config, profile)

    if profile is ProfileConfig.ON:
        create_profile(instance, suite_config)

    stats = parse_floxer_stats(instance.stats_path)
    resource_metrics = parse_resource_metrics(instance.timing_path)
    mapped_read_stats = analyze_mapped_reads(instance.mapped_reads_bam_path)

    if (
        config.queries is Queries.SIMULATED
        and config.reference is Reference.SIMULATED
        and suite_config.simulated_dataset_binary is not None
    ):
        summary = verify_simulated_dataset(
            instance.mapped_reads_bam_path,
            binary=suite_config.simulated_dataset_binary,
            timeout=suite_config.process_timeout_seconds,
        )
        logger.info(
            "Simulated dataset: %d optimal, %d missed",
            summary.num_optimal_mapped,
            summary.num_missed,
        )
        summary.log_if_missed()

    return FloxerRunResult(
        benchmark_instance_name=config.name,
        stats=stats,
        resource_metrics=resource_metrics,
        mapped_read_stats=mapped_read_stats,
        instance_folder=instance,
        reused=reused,
    )
