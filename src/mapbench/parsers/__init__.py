"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/parsers/__init__.py

Typed readers for the TOML artifacts written by GNU time, floxer and
compare_aligner_outputs.
--------------------------------------------------------------------------------
"""

from mapbench.parsers.comparison import DetailedMappedReadsComparison, parse_comparison
from mapbench.parsers.stats import FloxerStats, HistogramData, parse_floxer_stats
from mapbench.parsers.timing import ResourceMetrics, parse_resource_metrics

__all__ = [
    "DetailedMappedReadsComparison",
    "FloxerStats",
    "HistogramData",
    "ResourceMetrics",
    "parse_comparison",
    "parse_floxer_stats",
    "parse_resource_metrics",
]
