"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/analysis/simulated.py

Checks floxer output for the simulated dataset against the known origins of
the simulated reads, using the external simulation binary (``verify``).
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Union

from pydantic import field_validator

from mapbench.errors import ConfigError
from mapbench.parsers.toml_artifact import ArtifactModel, loads_toml, validate_payload
from mapbench.readmappers import process

logger = logging.getLogger(__name__)

_LABEL = "simulated dataset verification"


class FoundSuboptimal(ArtifactModel):
    pos_diff_expected_num_errors: int
    pos_diff_higher_num_errors: int


MappingStatus = Union[Literal["NotFound", "FoundOptimal"], FoundSuboptimal]


class VerifiedSimulatedQuery(ArtifactModel):
    id: str
    status: MappingStatus

    @field_validator("status", mode="before")
    @classmethod
    def _unwrap_tagged_status(cls, value: Any) -> Any:
        if isinstance(value, dict) and set(value) == {"FoundSuboptimal"}:
            return value["FoundSuboptimal"]
        return value


class VerifiedSimulatedDataset(ArtifactModel):
    queries: list[VerifiedSimulatedQuery] = []


@dataclass
class SimulatedDatasetVerificationSummary:
    num_optimal_mapped: int = 0
    suboptimal_mapped_queries: list[VerifiedSimulatedQuery] = field(default_factory=list)
    unmapped_queries: list[VerifiedSimulatedQuery] = field(default_factory=list)

    @property
    def num_missed(self) -> int:
        return len(self.suboptimal_mapped_queries) + len(self.unmapped_queries)

    def log_if_missed(self) -> None:
        for query in [*self.unmapped_queries, *self.suboptimal_mapped_queries]:
            logger.warning("Query %s: %s", query.id, query.status)


def summarize_verification(dataset: VerifiedSimulatedDataset) -> SimulatedDatasetVerificationSummary:
    summary = SimulatedDatasetVerificationSummary()
    for query in dataset.queries:
        if query.status == "NotFound":
            summary.unmapped_queries.append(query)
        elif query.status == "FoundOptimal":
            summary.num_optimal_mapped += 1
        else:
            summary.suboptimal_mapped_queries.append(query)
    return summary


def verify_simulated_dataset(
    mapped_reads_path: Path,
    *,
    binary: Path | None,
    timeout: float | None = None,
) -> SimulatedDatasetVerificationSummary:
    if binary is None:
        raise ConfigError("simulated_dataset_binary is not configured")
    result = process.run_checked(
        [binary, "verify", "--alignments", mapped_reads_path],
        what="simulated dataset verification",
        timeout=timeout,
    )
    payload = loads_toml(result.stdout, label=_LABEL)
    dataset = validate_payload(VerifiedSimulatedDataset, payload, label=_LABEL)
    return summarize_verification(dataset)
