"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/tests/benchmarks/test_catalog.py
--------------------------------------------------------------------------------
"""

import os
from datetime import datetime
from pathlib import Path

import pytest

import mapbench.benchmarks.catalog as catalog
from mapbench.analysis.mapped_reads import MappedReadsStats
from mapbench.benchmarks.sweep import BenchmarkContext, SweepResult
from mapbench.core.datasets import Queries, Reference
from mapbench.core.params import (
    BenchmarkConfig,
    ErrorRate,
    ExactErrors,
    IntervalOptimization,
    PexTreeConstruction,
)
from mapbench.errors import ProcessFailedError
from mapbench.parsers.comparison import parse_comparison
from mapbench.parsers.timing import parse_resource_metrics
from mapbench.readmappers.minimap import MinimapRunResult

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"


@pytest.fixture
def captured(monkeypatch: pytest.MonkeyPatch) -> dict:
    sweeps: dict = {}

    def _sweep(name, configs, context):
        sweeps[name] = list(configs)
        return SweepResult(name=name, benchmark_folder=None)

    monkeypatch.setattr(catalog, "run_floxer_sweep", _sweep)
    return sweeps


def _context(suite_config, **bc) -> BenchmarkContext:
    return BenchmarkContext(suite_config=suite_config, benchmark_config=BenchmarkConfig(**bc))


def test_registry_lists_every_benchmark() -> None:
    assert list(catalog.BENCHMARKS) == [
        "anchor_group_order",
        "anchor_choice_strategy",
        "debug",
        "interval_optimization",
        "pex_seed_errors",
        "pex_tree_building",
        "query_error_rate",
        "seed_sampling_step_size",
        "soft_anchor_cap",
        "verification_algorithm",
        "floxer_vs_minimap",
    ]
    assert all(catalog.describe(name) for name in catalog.BENCHMARKS)


def test_pex_seed_errors_sweep(suite_config, captured) -> None:
    catalog.pex_seed_errors(_context(suite_config))
    configs = captured["pex_seed_errors"]
    assert [c.name for c in configs] == [f"pex_seed_errors_{n}" for n in range(4)]
    assert [c.algorithm_config.pex_seed_errors for c in configs] == [0, 1, 2, 3]


def test_query_error_rate_sweep(suite_config, captured) -> None:
    catalog.query_error_rate(_context(suite_config))
    configs = captured["query_error_rate"]
    assert [c.name for c in configs] == [
        "query_error_rate_0.03",
        "query_error_rate_0.05",
        "query_error_rate_0.07",
        "query_error_rate_0.09",
    ]
    assert configs[2].algorithm_config.query_errors == ErrorRate(rate=0.07)


def test_debug_sweep_overrides(suite_config, captured) -> None:
    catalog.debug(_context(suite_config))
    configs = captured["debug"]
    assert [c.name for c in configs] == [str(p) for p in PexTreeConstruction]
    for config in configs:
        algo = config.algorithm_config
        assert algo.query_errors == ExactErrors(count=2)
        assert algo.num_threads == 1
        assert algo.pex_seed_errors == 1
        assert algo.extra_verification_ratio == 2.0


def test_interval_optimization_names(suite_config, captured) -> None:
    catalog.interval_optimization(_context(suite_config))
    configs = captured["interval_optimization"]
    assert [c.name for c in configs] == ["interval_optimization_on", "interval_optimization_off"]
    assert [c.algorithm_config.interval_optimization for c in configs] == list(IntervalOptimization)


def test_instances_inherit_benchmark_datasets(suite_config, captured) -> None:
    catalog.soft_anchor_cap(
        _context(suite_config, reference=Reference.DEBUG, queries=Queries.DEBUG, only_analysis=True)
    )
    configs = captured["soft_anchor_cap"]
    assert [c.algorithm_config.max_num_anchors_soft for c in configs] == [5, 10, 20, 50, 100]
    assert all(c.reference is Reference.DEBUG and c.queries is Queries.DEBUG for c in configs)
    assert all(c.only_analysis for c in configs)


@pytest.mark.parametrize("name", [n for n in catalog.BENCHMARKS if n != "floxer_vs_minimap"])
def test_every_sweep_has_unique_instance_names(suite_config, captured, name) -> None:
    catalog.BENCHMARKS[name](_context(suite_config))
    names = [c.name for c in captured[name]]
    assert len(names) >= 2
    assert len(set(names)) == len(names)


def test_floxer_vs_minimap(suite_config, fake_floxer, analyzed_paths, monkeypatch) -> None:
    minimap_calls = []
    compare_calls = []

    def _run_minimap(config, folder, cfg):
        minimap_calls.append(config)
        instance = folder.instance(config.name).create()
        return MinimapRunResult(
            map_resource_metrics=parse_resource_metrics(FIXTURES / "timing.toml"),
            index_resource_metrics=None,
            mapped_read_stats=MappedReadsStats(num_mapped=3, primary_alignment_edit_distances=[0, 1, 2]),
            instance_folder=instance,
        )

    def _compare(floxer_path, minimap_path, error_rate, folder, cfg):
        compare_calls.append((floxer_path, minimap_path, error_rate))
        return parse_comparison(FIXTURES / "comparison.toml")

    monkeypatch.setattr(catalog, "run_minimap", _run_minimap)
    monkeypatch.setattr(catalog, "compare_aligner_outputs", _compare)
    context = BenchmarkContext(suite_config=suite_config, clock=lambda: datetime(2024, 5, 17, 9, 0, 0))

    result = catalog.floxer_vs_minimap(context)

    folder = result.benchmark_folder
    assert [r.benchmark_instance_name for r in result.floxer_results] == ["floxer"]
    assert minimap_calls[0].name == "minimap"
    assert compare_calls == [
        (
            folder.instance("floxer").mapped_reads_bam_path,
            folder.instance("minimap").mapped_reads_sam_path,
            suite_config.comparison_error_rate,
        )
    ]
    assert result.comparison is not None
    assert result.minimap_result is not None
    assert result.most_recent_link_updated
    assert os.readlink(folder.most_recent_link()) == folder.path.name


def test_floxer_vs_minimap_failure_leaves_link_alone(suite_config, fake_floxer, analyzed_paths, monkeypatch) -> None:
    def _broken_minimap(config, folder, cfg):
        raise ProcessFailedError("minimap2 exited with code 1", command=["minimap2"], returncode=1)

    monkeypatch.setattr(catalog, "run_minimap", _broken_minimap)
    context = BenchmarkContext(suite_config=suite_config, clock=lambda: datetime(2024, 5, 17, 9, 0, 0))

    with pytest.raises(ProcessFailedError):
        catalog.floxer_vs_minimap(context)

    (folder,) = [p for p in (suite_config.output_folder / "floxer_vs_minimap").glob("*/*") if p.is_dir()]
    assert not (folder.parent / "most_recent").exists()
    assert (folder / "floxer" / "mapped_reads.bam").exists()
