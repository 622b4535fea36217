"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/tests/benchmarks/test_sweep.py
--------------------------------------------------------------------------------
"""

import json
import os
from datetime import datetime, timedelta

import pandas as pd
import pytest

from mapbench.benchmarks.manifest import load_sweep_manifest
from mapbench.benchmarks.sweep import BenchmarkContext, SweepResult, run_benchmarks, run_floxer_sweep
from mapbench.core.params import BenchmarkConfig
from mapbench.errors import BenchmarkBatchError, ConfigError, ProcessFailedError


class _Clock:
    def __init__(self) -> None:
        self.now = datetime(2024, 5, 17, 9, 0, 0)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


def _context(suite_config, **kwargs) -> BenchmarkContext:
    return BenchmarkContext(suite_config=suite_config, clock=_Clock(), **kwargs)


def test_results_follow_input_order(suite_config, fake_floxer, analyzed_paths) -> None:
    context = _context(suite_config)
    configs = [context.floxer_config(name=name) for name in ("C", "A", "B")]

    result = run_floxer_sweep("order", configs, context)

    assert [r.benchmark_instance_name for r in result.floxer_results] == ["C", "A", "B"]
    assert fake_floxer.instance_names() == ["C", "A", "B"]
    assert result.succeeded
    assert result.most_recent_link_updated
    assert os.readlink(result.benchmark_folder.most_recent_link()) == result.benchmark_folder.path.name


def test_summary_table_and_manifest(suite_config, fake_floxer, analyzed_paths) -> None:
    context = _context(suite_config)
    result = run_floxer_sweep("summary", [context.floxer_config(name="a"), context.floxer_config(name="b")], context)

    assert result.summary_path == result.benchmark_folder.table_path("summary")
    df = pd.read_csv(result.summary_path)
    assert list(df["instance"]) == ["a", "b"]
    assert list(df["wall_clock_seconds"]) == [12.3, 12.3]
    assert list(df["num_mapped"]) == [2, 2]

    manifest = load_sweep_manifest(result.benchmark_folder.manifest_path())
    assert [run.status for run in manifest.instances] == ["success", "success"]
    assert manifest.most_recent_link_updated
    assert manifest.instances[0].config["algorithm_config"]["query_errors"] == {"kind": "rate", "rate": 0.09}


def test_abort_policy_stops_at_first_failure(suite_config, fake_floxer, analyzed_paths) -> None:
    fake_floxer.fail_instances.add("B")
    context = _context(suite_config)
    configs = [context.floxer_config(name=name) for name in ("A", "B", "C")]

    with pytest.raises(ProcessFailedError):
        run_floxer_sweep("abort", configs, context)

    assert fake_floxer.instance_names() == ["A", "B"]
    folders = [p for p in (suite_config.output_folder / "abort").rglob("*") if p.name == "sweep_manifest.json"]
    (manifest_path,) = folders
    manifest = json.loads(manifest_path.read_text())
    assert [run["status"] for run in manifest["instances"]] == ["success", "error", "skipped"]
    assert not (manifest_path.parent.parent / "most_recent").is_symlink()


def test_continue_policy_records_failures(suite_config, fake_floxer, analyzed_paths) -> None:
    fake_floxer.fail_instances.add("B")
    context = _context(suite_config, on_instance_error="continue")
    configs = [context.floxer_config(name=name) for name in ("A", "B", "C")]

    result = run_floxer_sweep("keep_going", configs, context)

    assert [r.benchmark_instance_name for r in result.floxer_results] == ["A", "C"]
    assert [f.instance_name for f in result.failures] == ["B"]
    assert "exited with code 3" in result.failures[0].message
    assert not result.succeeded
    assert not result.most_recent_link_updated
    assert not result.benchmark_folder.most_recent_link().exists()
    manifest = load_sweep_manifest(result.benchmark_folder.manifest_path())
    assert (manifest.count("success"), manifest.count("error"), manifest.count("skipped")) == (2, 1, 0)


def test_analysis_only_replay_reuses_previous_artifacts(suite_config, fake_floxer, analyzed_paths) -> None:
    clock = _Clock()
    first_context = BenchmarkContext(suite_config=suite_config, clock=clock)
    first = run_floxer_sweep("replay", [first_context.floxer_config(name="default")], first_context)
    assert len(fake_floxer.calls) == 1

    replay_context = BenchmarkContext(
        suite_config=suite_config,
        benchmark_config=BenchmarkConfig(only_analysis=True),
        clock=clock,
    )
    second = run_floxer_sweep("replay", [replay_context.floxer_config(name="default")], replay_context)

    assert len(fake_floxer.calls) == 1
    (replayed,) = second.floxer_results
    assert replayed.reused
    original = first.floxer_results[0]
    assert replayed.instance_folder.stats_path.resolve() == original.instance_folder.stats_path.resolve()
    assert replayed.resource_metrics == original.resource_metrics
    assert replayed.stats == original.stats
    assert analyzed_paths[0].resolve() == analyzed_paths[1].resolve()
    # a pure replay leaves the alias on the run that produced the artifacts
    assert not second.most_recent_link_updated
    assert os.readlink(first.benchmark_folder.most_recent_link()) == first.benchmark_folder.path.name


def test_sweeps_started_in_the_same_second_get_separate_folders(suite_config, fake_floxer, analyzed_paths) -> None:
    fixed = datetime(2024, 5, 17, 9, 3, 7)
    context = BenchmarkContext(suite_config=suite_config, clock=lambda: fixed)
    first = run_floxer_sweep("s", [context.floxer_config(name="a")], context)
    second = run_floxer_sweep("s", [context.floxer_config(name="a")], context)

    assert first.benchmark_folder.path != second.benchmark_folder.path
    assert second.benchmark_folder.path.name == f"{first.benchmark_folder.path.name}_1"
    assert load_sweep_manifest(first.benchmark_folder.manifest_path()).sweep_name == "s"
    assert first.floxer_results[0].instance_folder.stats_path.exists()
    assert os.readlink(second.benchmark_folder.most_recent_link()) == second.benchmark_folder.path.name


def test_mixed_replay_keeps_replayed_instances_reachable(suite_config, fake_floxer, analyzed_paths) -> None:
    clock = _Clock()
    plain = BenchmarkContext(suite_config=suite_config, clock=clock)
    replay = BenchmarkContext(
        suite_config=suite_config,
        benchmark_config=BenchmarkConfig(only_analysis=True),
        clock=clock,
    )
    first = run_floxer_sweep("m", [plain.floxer_config(name="a")], plain)
    second = run_floxer_sweep("m", [replay.floxer_config(name="a"), replay.floxer_config(name="b")], replay)
    assert [r.reused for r in second.floxer_results] == [True, False]
    assert second.most_recent_link_updated
    linked = second.benchmark_folder.instance("a").path
    assert linked.is_symlink()
    assert linked.resolve() == first.benchmark_folder.instance("a").path.resolve()
    manifest = load_sweep_manifest(second.benchmark_folder.manifest_path())
    assert manifest.instances[0].instance_dir == str(linked)
    assert len(fake_floxer.calls) == 2

    third = run_floxer_sweep("m", [replay.floxer_config(name="a")], replay)
    assert third.floxer_results[0].reused
    assert len(fake_floxer.calls) == 2
    assert third.floxer_results[0].instance_folder.stats_path.resolve() == (
        first.benchmark_folder.instance("a").stats_path.resolve()
    )


def test_duplicate_instance_names_rejected(suite_config) -> None:
    context = _context(suite_config)
    with pytest.raises(ConfigError, match="Duplicate"):
        run_floxer_sweep("dup", [context.floxer_config(name="a"), context.floxer_config(name="a")], context)


def test_unnamed_sweeps_use_context_counter(suite_config, fake_floxer, analyzed_paths) -> None:
    context = _context(suite_config)
    first = run_floxer_sweep(None, [context.floxer_config(name="a")], context)
    second = run_floxer_sweep(None, [context.floxer_config(name="a")], context)
    assert (first.name, second.name) == ("unnamed_benchmark_0", "unnamed_benchmark_1")
    assert BenchmarkContext(suite_config=suite_config).next_sweep_name() == "unnamed_benchmark_0"


def test_invalid_failure_policy(suite_config) -> None:
    with pytest.raises(ConfigError):
        BenchmarkContext(suite_config=suite_config, on_instance_error="retry")


def test_parquet_summary(suite_config, fake_floxer, analyzed_paths) -> None:
    context = _context(suite_config, table_format="parquet")
    result = run_floxer_sweep("pq", [context.floxer_config(name="a")], context)
    assert result.summary_path.suffix == ".parquet"
    assert list(pd.read_parquet(result.summary_path)["instance"]) == ["a"]


def test_batch_runs_everything_and_counts_failures(suite_config) -> None:
    order: list[str] = []

    def _ok(name):
        def run(context):
            order.append(name)
            return SweepResult(name=name, benchmark_folder=None)

        return run

    def _boom(context):
        order.append("boom")
        raise RuntimeError("kaboom")

    def _partial(context):
        order.append("partial")
        result = SweepResult(name="partial", benchmark_folder=None)
        result.failures.append(object())
        return result

    registry = {"first": _ok("first"), "boom": _boom, "partial": _partial, "last": _ok("last")}
    with pytest.raises(BenchmarkBatchError) as excinfo:
        run_benchmarks(["first", "boom", "partial", "last"], _context(suite_config), registry=registry)

    assert order == ["first", "boom", "partial", "last"]
    assert excinfo.value.num_failed == 2
    assert excinfo.value.failed == ["boom", "partial"]
    assert [r.name for r in excinfo.value.results] == ["first", "partial", "last"]
    assert (suite_config.output_folder / "indices").is_dir()
    assert (suite_config.output_folder / "all_plots").is_dir()


def test_batch_returns_results_when_all_succeed(suite_config) -> None:
    registry = {"only": lambda context: SweepResult(name="only", benchmark_folder=None)}
    results = run_benchmarks(["only"], _context(suite_config), registry=registry)
    assert [r.name for r in results] == ["only"]


def test_unknown_benchmark_name(suite_config) -> None:
    with pytest.raises(ConfigError, match="Unknown benchmark"):
        run_benchmarks(["nope"], _context(suite_config), registry={})
