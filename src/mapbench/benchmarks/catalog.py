"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/benchmarks/catalog.py

Named benchmarks. Each one derives its instance configs from the context's
BenchmarkConfig, varies a single algorithm parameter and runs the result as
one sweep. ``floxer_vs_minimap`` additionally runs the reference aligner and
the detailed output comparison.
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import logging
from typing import Callable

from mapbench.analysis.comparison import compare_aligner_outputs
from mapbench.benchmarks.sweep import (
    BenchmarkContext,
    BenchmarkFn,
    SweepResult,
    promote_to_most_recent,
    run_floxer_sweep,
)
from mapbench.core.params import (
    AnchorChoiceStrategy,
    AnchorGroupOrder,
    ErrorRate,
    ExactErrors,
    IntervalOptimization,
    MinimapConfig,
    PexTreeConstruction,
    VerificationAlgorithm,
    query_errors_label,
)
from mapbench.readmappers.minimap import run_minimap

logger = logging.getLogger(__name__)

BENCHMARKS: dict[str, BenchmarkFn] = {}

QUERY_ERROR_RATES = (0.03, 0.05, 0.07, 0.09)
PEX_SEED_ERRORS = range(0, 4)
SOFT_ANCHOR_CAPS = (5, 10, 20, 50, 100)
SEED_SAMPLING_STEP_SIZES = (1, 2, 3, 4)


def benchmark(name: str) -> Callable[[BenchmarkFn], BenchmarkFn]:
    def register(fn: BenchmarkFn) -> BenchmarkFn:
        if name in BENCHMARKS:
            raise ValueError(f"Benchmark already registered: {name}")
        BENCHMARKS[name] = fn
        return fn

    return register


def describe(name: str) -> str:
    doc = (BENCHMARKS[name].__doc__ or "").strip()
    return doc.splitlines()[0] if doc else ""


@benchmark("anchor_group_order")
def anchor_group_order(context: BenchmarkContext) -> SweepResult:
    """Order in which anchor groups are considered (count first vs errors first)."""
    configs = [
        context.floxer_config(name=str(order)).with_algorithm(anchor_group_order=order) for order in AnchorGroupOrder
    ]
    return run_floxer_sweep("anchor_group_order", configs, context)


@benchmark("anchor_choice_strategy")
def anchor_choice_strategy(context: BenchmarkContext) -> SweepResult:
    """Round robin vs full groups when choosing anchors under the soft cap."""
    configs = [
        context.floxer_config(name=str(strategy)).with_algorithm(anchor_choice_strategy=strategy)
        for strategy in AnchorChoiceStrategy
    ]
    return run_floxer_sweep("anchor_choice_strategy", configs, context)


@benchmark("debug")
def debug(context: BenchmarkContext) -> SweepResult:
    """Small single-threaded run with exact query errors, for debugging floxer."""
    configs = [
        context.floxer_config(name=str(construction)).with_algorithm(
            pex_tree_construction=construction,
            extra_verification_ratio=2.0,
            num_threads=1,
            pex_seed_errors=1,
            query_errors=ExactErrors(count=2),
        )
        for construction in PexTreeConstruction
    ]
    return run_floxer_sweep("debug", configs, context)


@benchmark("interval_optimization")
def interval_optimization(context: BenchmarkContext) -> SweepResult:
    """Interval optimization on vs off."""
    configs = [
        context.floxer_config(name=setting.label).with_algorithm(interval_optimization=setting)
        for setting in IntervalOptimization
    ]
    return run_floxer_sweep("interval_optimization", configs, context)


@benchmark("pex_seed_errors")
def pex_seed_errors(context: BenchmarkContext) -> SweepResult:
    """Number of errors allowed per PEX seed (0 to 3)."""
    configs = [
        context.floxer_config(name=f"pex_seed_errors_{num_errors}").with_algorithm(pex_seed_errors=num_errors)
        for num_errors in PEX_SEED_ERRORS
    ]
    return run_floxer_sweep("pex_seed_errors", configs, context)


@benchmark("pex_tree_building")
def pex_tree_building(context: BenchmarkContext) -> SweepResult:
    """Bottom-up vs top-down PEX tree construction."""
    configs = [
        context.floxer_config(name=str(construction)).with_algorithm(pex_tree_construction=construction)
        for construction in PexTreeConstruction
    ]
    return run_floxer_sweep("pex_tree_building", configs, context)


@benchmark("query_error_rate")
def query_error_rate(context: BenchmarkContext) -> SweepResult:
    """Query error rates 0.03 to 0.09."""
    configs = []
    for rate in QUERY_ERROR_RATES:
        query_errors = ErrorRate(rate=rate)
        configs.append(
            context.floxer_config(name=query_errors_label(query_errors)).with_algorithm(query_errors=query_errors)
        )
    return run_floxer_sweep("query_error_rate", configs, context)


@benchmark("seed_sampling_step_size")
def seed_sampling_step_size(context: BenchmarkContext) -> SweepResult:
    """Use only every n-th seed."""
    configs = [
        context.floxer_config(name=str(step)).with_algorithm(seed_sampling_step_size=step)
        for step in SEED_SAMPLING_STEP_SIZES
    ]
    return run_floxer_sweep("seed_sampling_step_size", configs, context)


@benchmark("soft_anchor_cap")
def soft_anchor_cap(context: BenchmarkContext) -> SweepResult:
    """Soft cap on the number of anchors per query."""
    configs = [
        context.floxer_config(name=f"soft_cap_{cap}").with_algorithm(max_num_anchors_soft=cap)
        for cap in SOFT_ANCHOR_CAPS
    ]
    return run_floxer_sweep("soft_anchor_cap", configs, context)


@benchmark("verification_algorithm")
def verification_algorithm(context: BenchmarkContext) -> SweepResult:
    """Hierarchical vs direct full verification."""
    configs = [
        context.floxer_config(name=str(algorithm)).with_algorithm(verification_algorithm=algorithm)
        for algorithm in VerificationAlgorithm
    ]
    return run_floxer_sweep("verification_algorithm", configs, context)


@benchmark("floxer_vs_minimap")
def floxer_vs_minimap(context: BenchmarkContext) -> SweepResult:
    """Default floxer against minimap2, followed by a detailed output comparison."""
    suite_config = context.suite_config
    result = run_floxer_sweep(
        "floxer_vs_minimap",
        [context.floxer_config(name="floxer")],
        context,
        update_link=False,
    )
    if not result.succeeded:
        return result

    minimap_config = MinimapConfig.from_benchmark_config(context.benchmark_config)
    result.minimap_result = run_minimap(minimap_config, result.benchmark_folder, suite_config)

    floxer_result = result.floxer_results[0]
    result.comparison = compare_aligner_outputs(
        floxer_result.instance_folder.mapped_reads_bam_path,
        result.minimap_result.instance_folder.mapped_reads_sam_path,
        suite_config.comparison_error_rate,
        result.benchmark_folder,
        suite_config,
    )
    general = result.comparison.general_stats
    logger.info(
        "floxer mapped %d, minimap mapped %d, both %d of %d queries",
        general.floxer_mapped,
        general.minimap_mapped,
        general.both_mapped,
        general.number_of_queries,
    )
    # minimap always executes, so the folder holds fresh results
    promote_to_most_recent(result)
    return result
