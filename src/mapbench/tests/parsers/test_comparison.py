"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/tests/parsers/test_comparison.py
--------------------------------------------------------------------------------
"""

from pathlib import Path

import pytest

from mapbench.errors import ArtifactParseError
from mapbench.parsers.comparison import SCOPE_LABELS, parse_comparison, parse_comparison_text

FIXTURES = Path(__file__).resolve().parents[1] / "fixtures"


def test_parse_comparison_fixture() -> None:
    comparison = parse_comparison(FIXTURES / "comparison.toml")
    general = comparison.general_stats
    assert general.number_of_queries == 100
    assert general.both_mapped == 80
    assert general.floxer_unmapped_and_minimap_mapped == 10
    assert comparison.floxer_stats_if_floxer_mapped.num_queries == 85
    assert comparison.minimap_stats_if_only_minimap_mapped.average_longest_indel == pytest.approx(15.0)


def test_scopes_follow_label_order() -> None:
    comparison = parse_comparison(FIXTURES / "comparison.toml")
    assert [key for key, _ in comparison.scopes()] == list(SCOPE_LABELS)


def test_primary_fractions() -> None:
    comparison = parse_comparison(FIXTURES / "comparison.toml")
    fractions = comparison.minimap_stats_if_only_minimap_mapped.primary_fractions()
    assert fractions["primary_chimeric"] == pytest.approx(0.4)
    assert fractions["primary_linear_basic"] == pytest.approx(0.2)


def test_missing_scope_is_a_parse_error() -> None:
    text = (FIXTURES / "comparison.toml").read_text().split("[minimap_stats_if_only_minimap_mapped]")[0]
    with pytest.raises(ArtifactParseError, match="minimap_stats_if_only_minimap_mapped"):
        parse_comparison_text(text)


def test_garbage_output_is_a_parse_error() -> None:
    with pytest.raises(ArtifactParseError, match="Malformed aligner comparison"):
        parse_comparison_text("thread 'main' panicked at src/main.rs:12:5")
