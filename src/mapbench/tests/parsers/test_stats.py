"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/tests/parsers/test_stats.py
--------------------------------------------------------------------------------
"""

from pathlib import Path

import pytest

from mapbench.errors import ArtifactParseError
from mapbench.parsers.stats import HistogramData, parse_floxer_stats, parse_floxer_stats_text

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"


def test_single_histogram_stats_file() -> None:
    stats = parse_floxer_stats(FIXTURES / "stats_minimal.toml")
    hist = stats.query_lengths
    assert hist is not None
    assert hist.num_buckets == 3
    assert sum(hist.occurrences) == 6
    assert hist.is_consistent()
    assert hist.descriptive_stats is None
    assert hist.axis_names() == ["<= 10", "<= 20", "<= inf"]
    assert stats.seed_stats.seed_lengths is None
    assert stats.completely_excluded_queries is None


def test_flattened_groups_are_regrouped() -> None:
    stats = parse_floxer_stats(FIXTURES / "stats_full.toml")
    assert stats.completely_excluded_queries == 3
    assert stats.seed_stats.seed_lengths is not None
    assert stats.seed_stats.errors_per_seed is not None
    assert stats.anchor_stats_per_query.kept_anchors_per_query is not None
    assert stats.alignment_stats.reference_span_sizes_aligned_of_roots is not None
    assert stats.histogram("seed_lengths") is stats.seed_stats.seed_lengths
    assert stats.histogram("alignments_per_query") is stats.alignments_per_query


def test_unknown_tables_are_kept_as_extras() -> None:
    stats = parse_floxer_stats(FIXTURES / "stats_full.toml")
    assert set(stats.extra_histograms) == {"anchors_per_verification_task"}
    assert stats.extra_counters == {"num_queries_with_overflowing_anchors": 1}
    assert stats.histogram("anchors_per_verification_task") is stats.extra_histograms["anchors_per_verification_task"]


def test_histogram_shape_holds_for_every_parsed_histogram() -> None:
    stats = parse_floxer_stats(FIXTURES / "stats_full.toml")
    histograms = list(stats.named_histograms())
    assert len(histograms) == 8
    for _, _, hist in histograms:
        assert len(hist.occurrences) == len(hist.thresholds) + 1
        if hist.descriptive_stats is not None:
            d = hist.descriptive_stats
            assert d.min_value <= d.mean <= d.max_value


def test_named_histograms_order_and_labels() -> None:
    stats = parse_floxer_stats(FIXTURES / "stats_full.toml")
    labels = [(group, label) for group, label, _ in stats.named_histograms()]
    assert labels[0] == ("general", "Query lengths")
    assert labels[-1] == ("extra", "Anchors per verification task")
    assert ("seed_stats", "Errors per seed") in labels


def test_inconsistent_counts_are_reported_not_rejected() -> None:
    stats = parse_floxer_stats(FIXTURES / "stats_full.toml")
    search = stats.milliseconds_spent_in_search_per_query
    assert search is not None
    assert not search.is_consistent()


def test_occurrence_count_must_match_thresholds() -> None:
    text = "[query_lengths]\nnum_values = 3\nthresholds = [10, 20]\noccurrences = [1, 2]\n"
    with pytest.raises(ArtifactParseError, match="thresholds"):
        parse_floxer_stats_text(text)


def test_partial_descriptive_stats_are_rejected() -> None:
    text = "[query_lengths]\nnum_values = 1\nthresholds = []\noccurrences = [1]\nmin_value = 1.0\nmean = 1.0\n"
    with pytest.raises(ArtifactParseError, match="max_value"):
        parse_floxer_stats_text(text)


def test_unexpected_scalar_is_rejected() -> None:
    with pytest.raises(ArtifactParseError, match="Unexpected entry 'floxer_version'"):
        parse_floxer_stats_text('floxer_version = "1.2"\n')


def test_descriptive_stats_accept_nested_form() -> None:
    hist = HistogramData.model_validate(
        {
            "num_values": 2,
            "thresholds": [5],
            "occurrences": [1, 1],
            "descriptive_stats": {"min_value": 1.0, "mean": 4.0, "max_value": 7.0},
        }
    )
    assert hist.descriptive_stats is not None
    assert hist.descriptive_stats.mean == 4.0
