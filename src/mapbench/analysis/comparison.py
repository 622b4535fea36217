"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/analysis/comparison.py

Head-to-head comparison of floxer and minimap output via the external
compare_aligner_outputs binary. The raw stdout is persisted next to the
benchmark before it is parsed, so the comparison survives parser changes.
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import logging
from pathlib import Path

from mapbench.artifacts.atomic_write import atomic_write_text
from mapbench.artifacts.layout import BenchmarkFolder
from mapbench.config.schema import SuiteConfig
from mapbench.core.params import format_float
from mapbench.errors import ConfigError
from mapbench.parsers.comparison import DetailedMappedReadsComparison, parse_comparison_text
from mapbench.readmappers import process

logger = logging.getLogger(__name__)


def build_comparison_command(
    *,
    binary: Path,
    floxer_mapped_reads: Path,
    minimap_mapped_reads: Path,
    error_rate: float,
) -> list[str]:
    return [
        str(binary),
        "--new",
        str(floxer_mapped_reads),
        "--reference",
        str(minimap_mapped_reads),
        "--error-rate",
        format_float(error_rate),
    ]


def compare_aligner_outputs(
    floxer_mapped_reads: Path,
    minimap_mapped_reads: Path,
    error_rate: float,
    benchmark_folder: BenchmarkFolder,
    suite_config: SuiteConfig,
) -> DetailedMappedReadsComparison:
    binary = suite_config.compare_aligner_outputs_binary
    if binary is None:
        raise ConfigError("compare_aligner_outputs_binary is not configured")
    command = build_comparison_command(
        binary=binary,
        floxer_mapped_reads=floxer_mapped_reads,
        minimap_mapped_reads=minimap_mapped_reads,
        error_rate=error_rate,
    )
    logger.info("Comparing %s against %s", floxer_mapped_reads, minimap_mapped_reads)
    result = process.run_checked(
        command,
        what="compare_aligner_outputs",
        timeout=suite_config.process_timeout_seconds,
    )
    result_path = benchmark_folder.comparison_path()
    atomic_write_text(result_path, result.stdout)
    logger.info("Wrote raw comparison to %s", result_path)
    return parse_comparison_text(result.stdout, path=result_path)
