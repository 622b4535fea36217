"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/core/datasets.py

Reference and query dataset identifiers. Filesystem paths for each dataset are
resolved by the suite config (see config/schema.py).
--------------------------------------------------------------------------------
"""

from __future__ import annotations

from enum import Enum


class Reference(str, Enum):
    HUMAN_GENOME_HG38 = "human_genome_hg38"
    MASKED_HUMAN_GENOME_HG38 = "masked_human_genome_hg38"
    DEBUG = "debug"
    SIMULATED = "simulated"

    def __str__(self) -> str:
        return self.value


class StatsInputHint(str, Enum):
    REAL_NANOPORE = "real_nanopore"
    SIMULATED = "simulated"

    def __str__(self) -> str:
        return self.value


class Queries(str, Enum):
    HUMAN_WGS_NANOPORE = "human_wgs_nanopore"
    HUMAN_WGS_NANOPORE_SMALL = "human_wgs_nanopore_small"
    DEBUG = "debug"
    PROBLEM_QUERY = "problem_query"
    SIMULATED = "simulated"
    SIMULATED_SMALL = "simulated_small"

    def __str__(self) -> str:
        return self.value

    @property
    def minimap_preset(self) -> str:
        # every query set so far is nanopore-like
        return "map-ont"

    @property
    def floxer_stats_input_hint(self) -> StatsInputHint | None:
        if self in (Queries.HUMAN_WGS_NANOPORE, Queries.HUMAN_WGS_NANOPORE_SMALL):
            return StatsInputHint.REAL_NANOPORE
        if self in (Queries.SIMULATED, Queries.SIMULATED_SMALL):
            return StatsInputHint.SIMULATED
        return None

    def smaller_equivalent(self) -> "Queries":
        if self in (Queries.HUMAN_WGS_NANOPORE, Queries.HUMAN_WGS_NANOPORE_SMALL):
            return Queries.HUMAN_WGS_NANOPORE_SMALL
        if self in (Queries.SIMULATED, Queries.SIMULATED_SMALL):
            return Queries.SIMULATED_SMALL
        return self


def dataset_tag(reference: Reference, queries: Queries) -> str:
    return f"{queries}_in_{reference}"
