"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/tests/conftest.py
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

import mapbench.readmappers.floxer as floxer_module
import mapbench.readmappers.process as process_module
from mapbench.analysis.mapped_reads import MappedReadsStats
from mapbench.config.schema import QueryPaths, ReadmapperBinaries, ReferencePaths, SuiteConfig

FIXTURES = Path(__file__).resolve().parent / "fixtures"

# GNU time wrapper: <time> --output <timing> --format <fmt> <command...>
_TIME_PREFIX_LEN = 5


def fixture_text(name: str) -> str:
    return (FIXTURES / name).read_text()


class FakeFloxer:
    """Stand-in for `run_command` that behaves like floxer under GNU time.

    Writes the timing and stats artifacts and an (empty) BAM placeholder, and
    records every argv it was called with.
    """

    def __init__(self, *, timing_text: str, stats_text: str) -> None:
        self.timing_text = timing_text
        self.stats_text = stats_text
        self.calls: list[list[str]] = []
        self.fail_instances: set[str] = set()
        self.stdout = ""

    def instance_names(self) -> list[str]:
        return [Path(_value_after(argv[_TIME_PREFIX_LEN:], "--output")).parent.name for argv in self.calls]

    def __call__(self, command, *, timeout=None) -> subprocess.CompletedProcess[str]:
        argv = [str(part) for part in command]
        self.calls.append(argv)
        tool_args = argv[_TIME_PREFIX_LEN:]
        bam_path = Path(_value_after(tool_args, "--output"))
        if bam_path.parent.name in self.fail_instances:
            return subprocess.CompletedProcess(argv, 3, "", "floxer: simulated crash\n")
        Path(argv[2]).write_text(self.timing_text)
        Path(_value_after(tool_args, "--stats")).write_text(self.stats_text)
        bam_path.write_bytes(b"")
        return subprocess.CompletedProcess(argv, 0, self.stdout, "")


def _value_after(argv: list[str], flag: str) -> str:
    return argv[argv.index(flag) + 1]


@pytest.fixture
def suite_config(tmp_path: Path) -> SuiteConfig:
    data = tmp_path / "data"
    data.mkdir()
    reference = data / "reference.fa"
    reference.write_text(">chr1\nACGTACGTACGT\n")
    queries = data / "queries.fq"
    queries.write_text("@q1\nACGTACGT\n+\nIIIIIIII\n")
    return SuiteConfig(
        output_folder=tmp_path / "out",
        readmapper_binaries=ReadmapperBinaries(floxer=Path("/opt/bin/floxer"), minimap=Path("/opt/bin/minimap2")),
        reference_paths=ReferencePaths(human_genome_hg38=reference, simulated=reference),
        query_paths=QueryPaths(human_wgs_nanopore=queries, simulated=queries),
        compare_aligner_outputs_binary=Path("/opt/bin/compare_aligner_outputs"),
    )


@pytest.fixture
def fake_floxer(monkeypatch: pytest.MonkeyPatch) -> FakeFloxer:
    fake = FakeFloxer(timing_text=fixture_text("timing.toml"), stats_text=fixture_text("stats_minimal.toml"))
    monkeypatch.setattr(process_module, "run_command", fake)
    return fake


@pytest.fixture
def analyzed_paths(monkeypatch: pytest.MonkeyPatch) -> list[Path]:
    """Replace BAM analysis with a fixed result; collect the paths it was asked to read."""
    seen: list[Path] = []

    def _analyze(path: Path, *, allow_supplementary: bool = False) -> MappedReadsStats:
        assert path.exists()
        seen.append(path)
        return MappedReadsStats(num_mapped=2, primary_alignment_edit_distances=[1, 3], num_unmapped=1)

    monkeypatch.setattr(floxer_module, "analyze_mapped_reads", _analyze)
    return seen
