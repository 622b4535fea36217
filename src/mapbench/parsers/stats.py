"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/parsers/stats.py

Statistics written by floxer via ``--stats``.

The file is flat TOML: every histogram is a table with ``num_values``,
``thresholds``, ``occurrences`` and optionally ``min_value``/``mean``/
``max_value``; scalar counters sit at the top level. On parse the flat
namespace is regrouped into seed, anchor and alignment stats. Histograms are
optional because floxer revisions emit different subsets; unknown histograms
and integer counters are kept in ``extra_histograms`` / ``extra_counters``.
--------------------------------------------------------------------------------
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterator, Optional

from pydantic import Field, model_validator

from mapbench.errors import ArtifactParseError
from mapbench.parsers.toml_artifact import ArtifactModel, loads_toml, read_toml, validate_payload

_LABEL = "floxer stats file"
_HISTOGRAM_KEYS = {"num_values", "thresholds", "occurrences"}
_DESCRIPTIVE_KEYS = ("min_value", "mean", "max_value")


class DescriptiveStats(ArtifactModel):
    min_value: float
    mean: float
    max_value: float


class HistogramData(ArtifactModel):
    num_values: int
    thresholds: list[int]
    occurrences: list[int]
    descriptive_stats: Optional[DescriptiveStats] = None

    @model_validator(mode="before")
    @classmethod
    def _lift_descriptive_stats(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "descriptive_stats" in data:
            return data
        present = [key for key in _DESCRIPTIVE_KEYS if key in data]
        if not present:
            return data
        if len(present) != len(_DESCRIPTIVE_KEYS):
            missing = [key for key in _DESCRIPTIVE_KEYS if key not in data]
            raise ValueError(f"histogram has partial descriptive stats (missing {missing})")
        payload = {key: value for key, value in data.items() if key not in _DESCRIPTIVE_KEYS}
        payload["descriptive_stats"] = {key: data[key] for key in _DESCRIPTIVE_KEYS}
        return payload

    @model_validator(mode="after")
    def _check_shape(self) -> "HistogramData":
        if len(self.occurrences) != len(self.thresholds) + 1:
            raise ValueError(
                f"histogram needs len(thresholds) + 1 occurrences, got {len(self.thresholds)} thresholds "
                f"and {len(self.occurrences)} occurrences"
            )
        if any(b < a for a, b in zip(self.thresholds, self.thresholds[1:])):
            raise ValueError("histogram thresholds must be ascending")
        if self.num_values < 0 or any(count < 0 for count in self.occurrences):
            raise ValueError("histogram counts must be >= 0")
        return self

    @property
    def num_buckets(self) -> int:
        return len(self.occurrences)

    def axis_names(self) -> list[str]:
        return [f"<= {threshold}" for threshold in self.thresholds] + ["<= inf"]

    def is_consistent(self) -> bool:
        """True when the bucket counts add up to ``num_values``."""
        return sum(self.occurrences) == self.num_values


class SeedStats(ArtifactModel):
    seed_lengths: Optional[HistogramData] = None
    errors_per_seed: Optional[HistogramData] = None
    seeds_per_query: Optional[HistogramData] = None


class AnchorStatsPerQuery(ArtifactModel):
    completely_excluded_queries: Optional[int] = None
    fully_excluded_seeds_per_query: Optional[HistogramData] = None
    kept_anchors_per_query: Optional[HistogramData] = None
    excluded_raw_anchors_by_soft_cap_per_query: Optional[HistogramData] = None
    excluded_raw_anchors_by_erase_useless_per_query: Optional[HistogramData] = None


class AnchorStatsPerSeed(ArtifactModel):
    kept_anchors_per_kept_seed: Optional[HistogramData] = None
    excluded_raw_anchors_by_soft_cap_per_kept_seed: Optional[HistogramData] = None
    excluded_raw_anchors_by_erase_useless_per_kept_seed: Optional[HistogramData] = None


class AlignmentStats(ArtifactModel):
    reference_span_sizes_aligned_of_inner_nodes: Optional[HistogramData] = None
    reference_span_sizes_aligned_of_roots: Optional[HistogramData] = None
    reference_span_sizes_alignment_avoided_of_roots: Optional[HistogramData] = None


_GROUPS: dict[str, type[ArtifactModel]] = {
    "seed_stats": SeedStats,
    "anchor_stats_per_query": AnchorStatsPerQuery,
    "anchor_stats_per_seed": AnchorStatsPerSeed,
    "alignment_stats": AlignmentStats,
}

_GENERAL_HISTOGRAMS = (
    "query_lengths",
    "alignments_per_query",
    "alignments_edit_distance",
    "milliseconds_spent_in_search_per_query",
    "milliseconds_spent_in_verification_per_query",
)

METRIC_LABELS: dict[str, str] = {
    "query_lengths": "Query lengths",
    "alignments_per_query": "Alignments per query",
    "alignments_edit_distance": "Edit distances of alignments",
    "milliseconds_spent_in_search_per_query": "Milliseconds spent in search per query",
    "milliseconds_spent_in_verification_per_query": "Milliseconds spent in verification per query",
    "seed_lengths": "Seed lengths",
    "errors_per_seed": "Errors per seed",
    "seeds_per_query": "Seeds per query",
    "fully_excluded_seeds_per_query": "Fully excluded seeds per query",
    "kept_anchors_per_query": "Anchors per query from non excluded seeds",
    "excluded_raw_anchors_by_soft_cap_per_query": "Excluded raw anchors by soft cap per query",
    "excluded_raw_anchors_by_erase_useless_per_query": "Excluded raw anchors by erase useless per query",
    "kept_anchors_per_kept_seed": "Kept anchors per kept seed",
    "excluded_raw_anchors_by_soft_cap_per_kept_seed": "Excluded raw anchors by soft cap per kept seed",
    "excluded_raw_anchors_by_erase_useless_per_kept_seed": "Excluded raw anchors by erase useless per kept seed",
    "reference_span_sizes_aligned_of_inner_nodes": "Ref span sizes aligned inner",
    "reference_span_sizes_aligned_of_roots": "Ref span sizes aligned roots",
    "reference_span_sizes_alignment_avoided_of_roots": "Ref span sizes alignment avoided roots",
}


class FloxerStats(ArtifactModel):
    query_lengths: Optional[HistogramData] = None
    seed_stats: SeedStats = Field(default_factory=SeedStats)
    anchor_stats_per_query: AnchorStatsPerQuery = Field(default_factory=AnchorStatsPerQuery)
    anchor_stats_per_seed: AnchorStatsPerSeed = Field(default_factory=AnchorStatsPerSeed)
    alignment_stats: AlignmentStats = Field(default_factory=AlignmentStats)
    alignments_per_query: Optional[HistogramData] = None
    alignments_edit_distance: Optional[HistogramData] = None
    milliseconds_spent_in_search_per_query: Optional[HistogramData] = None
    milliseconds_spent_in_verification_per_query: Optional[HistogramData] = None
    extra_histograms: dict[str, HistogramData] = Field(default_factory=dict)
    extra_counters: dict[str, int] = Field(default_factory=dict)

    @property
    def completely_excluded_queries(self) -> Optional[int]:
        return self.anchor_stats_per_query.completely_excluded_queries

    def histogram(self, key: str) -> Optional[HistogramData]:
        if key in _GENERAL_HISTOGRAMS:
            return getattr(self, key)
        for group_name, group_model in _GROUPS.items():
            if key in group_model.model_fields:
                value = getattr(getattr(self, group_name), key)
                return value if isinstance(value, HistogramData) else None
        return self.extra_histograms.get(key)

    def named_histograms(self) -> Iterator[tuple[str, str, HistogramData]]:
        """Yield ``(group, label, histogram)`` for every histogram present, in presentation order."""
        for key in _GENERAL_HISTOGRAMS:
            hist = getattr(self, key)
            if hist is not None:
                yield "general", METRIC_LABELS[key], hist
        for group_name, group_model in _GROUPS.items():
            group = getattr(self, group_name)
            for key in group_model.model_fields:
                value = getattr(group, key)
                if isinstance(value, HistogramData):
                    yield group_name, METRIC_LABELS[key], value
        for key, hist in sorted(self.extra_histograms.items()):
            yield "extra", key.replace("_", " ").capitalize(), hist


def _looks_like_histogram(value: Any) -> bool:
    return isinstance(value, dict) and _HISTOGRAM_KEYS.issubset(value.keys())


def _regroup(payload: dict[str, Any], *, path: Path | None) -> dict[str, Any]:
    remaining = dict(payload)
    grouped: dict[str, Any] = {}
    for key in _GENERAL_HISTOGRAMS:
        if key in remaining:
            grouped[key] = remaining.pop(key)
    for group_name, group_model in _GROUPS.items():
        grouped[group_name] = {key: remaining.pop(key) for key in list(group_model.model_fields) if key in remaining}
    extra_histograms: dict[str, Any] = {}
    extra_counters: dict[str, int] = {}
    for key, value in remaining.items():
        if _looks_like_histogram(value):
            extra_histograms[key] = value
        elif isinstance(value, int) and not isinstance(value, bool):
            extra_counters[key] = value
        else:
            raise ArtifactParseError(f"Unexpected entry '{key}' in {_LABEL}", path=path)
    grouped["extra_histograms"] = extra_histograms
    grouped["extra_counters"] = extra_counters
    return grouped


def parse_floxer_stats_text(text: str, *, path: Path | None = None) -> FloxerStats:
    payload = loads_toml(text, label=_LABEL, path=path)
    return validate_payload(FloxerStats, _regroup(payload, path=path), label=_LABEL, path=path)


def parse_floxer_stats(path: Path) -> FloxerStats:
    payload = read_toml(path, label=_LABEL)
    return validate_payload(FloxerStats, _regroup(payload, path=path), label=_LABEL, path=path)
