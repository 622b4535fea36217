"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/parsers/comparison.py

Typed view of the TOML written by compare_aligner_outputs.
--------------------------------------------------------------------------------
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

from mapbench.parsers.toml_artifact import ArtifactModel, loads_toml, read_toml, validate_payload

_LABEL = "aligner comparison"


class FullStats(ArtifactModel):
    number_of_queries: int
    both_mapped: int
    both_unmapped: int
    floxer_mapped: int
    floxer_unmapped: int
    minimap_mapped: int
    minimap_unmapped: int
    floxer_unmapped_and_minimap_mapped: int
    minimap_unmapped_and_floxer_mapped: int


class ScopedStats(ArtifactModel):
    num_queries: int
    primary_chimeric: int
    primary_linear_basic: int
    primary_linear_clipped: int
    primary_high_edit_distance: int
    primary_inversion: int
    multiple_mapping: int
    primary_not_basic_secondary_basic: int
    average_longest_indel: float
    average_error_rate_of_primary_basic_alignments: float

    def primary_fractions(self) -> dict[str, float]:
        """Share of each primary-alignment category within this scope."""
        keys = (
            "primary_chimeric",
            "primary_linear_basic",
            "primary_linear_clipped",
            "primary_high_edit_distance",
            "primary_inversion",
        )
        if self.num_queries == 0:
            return {key: 0.0 for key in keys}
        return {key: getattr(self, key) / self.num_queries for key in keys}


SCOPE_LABELS: dict[str, str] = {
    "floxer_stats_if_floxer_mapped": "floxer, queries floxer mapped",
    "minimap_stats_if_minimap_mapped": "minimap, queries minimap mapped",
    "minimap_stats_if_both_mapped": "minimap, queries both mapped",
    "minimap_stats_if_only_minimap_mapped": "minimap, queries only minimap mapped",
}


class DetailedMappedReadsComparison(ArtifactModel):
    general_stats: FullStats
    floxer_stats_if_floxer_mapped: ScopedStats
    minimap_stats_if_minimap_mapped: ScopedStats
    minimap_stats_if_both_mapped: ScopedStats
    minimap_stats_if_only_minimap_mapped: ScopedStats

    def scopes(self) -> Iterator[tuple[str, ScopedStats]]:
        for key in SCOPE_LABELS:
            yield key, getattr(self, key)


def parse_comparison_text(text: str, *, path: Path | None = None) -> DetailedMappedReadsComparison:
    payload = loads_toml(text, label=_LABEL, path=path)
    return validate_payload(DetailedMappedReadsComparison, payload, label=_LABEL, path=path)


def parse_comparison(path: Path) -> DetailedMappedReadsComparison:
    payload = read_toml(path, label=_LABEL)
    return validate_payload(DetailedMappedReadsComparison, payload, label=_LABEL, path=path)
