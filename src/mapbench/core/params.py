"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/core/params.py

Immutable run configurations for the aligners under benchmark.

Configurations are frozen pydantic models. Sweeps derive variants through
``with_`` / ``with_algorithm`` which return new, re-validated instances.
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mapbench.core.datasets import Queries, Reference

DEFAULT_NUM_THREADS = 32
DEFAULT_ERROR_RATE = 0.09
MAX_NUM_ANCHORS_UNLIMITED = 2**64 - 1

_INSTANCE_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class FrozenModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    def with_(self, **changes: Any):
        payload = self.model_dump()
        payload.update(changes)
        return type(self).model_validate(payload)


class _SnakeEnum(str, Enum):
    def __str__(self) -> str:
        return self.value


class IndexStrategy(_SnakeEnum):
    ALWAYS_REBUILD = "always_rebuild"
    READ_FROM_DISK_IF_STORED = "read_from_disk_if_stored"


class AnchorGroupOrder(_SnakeEnum):
    ERRORS_FIRST = "errors_first"
    COUNT_FIRST = "count_first"


class AnchorChoiceStrategy(_SnakeEnum):
    ROUND_ROBIN = "round_robin"
    FULL_GROUPS = "full_groups"


class PexTreeConstruction(_SnakeEnum):
    TOP_DOWN = "top_down"
    BOTTOM_UP = "bottom_up"


class IntervalOptimization(_SnakeEnum):
    ON = "on"
    OFF = "off"

    @property
    def label(self) -> str:
        return f"interval_optimization_{self.value}"


class VerificationAlgorithm(_SnakeEnum):
    DIRECT_FULL = "direct_full"
    HIERARCHICAL = "hierarchical"


class CigarOutput(_SnakeEnum):
    ON = "on"
    OFF = "off"


class ProfileConfig(_SnakeEnum):
    ON = "on"
    OFF = "off"

    @classmethod
    def from_flag(cls, enabled: bool) -> "ProfileConfig":
        return cls.ON if enabled else cls.OFF


class ExactErrors(FrozenModel):
    kind: Literal["exact"] = "exact"
    count: int

    @field_validator("count")
    @classmethod
    def _check_count(cls, value: int) -> int:
        if value < 0:
            raise ValueError("query_errors.count must be >= 0")
        return value


class ErrorRate(FrozenModel):
    kind: Literal["rate"] = "rate"
    rate: float

    @field_validator("rate")
    @classmethod
    def _check_rate(cls, value: float) -> float:
        if not 0.0 <= value < 1.0:
            raise ValueError("query_errors.rate must be in [0, 1)")
        return float(value)


QueryErrors = Annotated[Union[ExactErrors, ErrorRate], Field(discriminator="kind")]


def query_errors_label(query_errors: ExactErrors | ErrorRate) -> str:
    if isinstance(query_errors, ExactErrors):
        return f"query_errors_{query_errors.count}"
    if isinstance(query_errors, ErrorRate):
        return f"query_error_rate_{format_float(query_errors.rate)}"
    raise TypeError(f"Unsupported query error variant: {query_errors!r}")


def format_float(value: float) -> str:
    """Shortest round-tripping text for ``value``; integral floats drop the fraction."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class FloxerAlgorithmConfig(FrozenModel):
    index_strategy: IndexStrategy = IndexStrategy.READ_FROM_DISK_IF_STORED
    query_errors: QueryErrors = Field(default_factory=lambda: ErrorRate(rate=DEFAULT_ERROR_RATE))
    pex_seed_errors: int = 2
    max_num_anchors_hard: int = MAX_NUM_ANCHORS_UNLIMITED
    max_num_anchors_soft: int = 100
    anchor_group_order: AnchorGroupOrder = AnchorGroupOrder.COUNT_FIRST
    anchor_choice_strategy: AnchorChoiceStrategy = AnchorChoiceStrategy.ROUND_ROBIN
    seed_sampling_step_size: int = 1
    pex_tree_construction: PexTreeConstruction = PexTreeConstruction.BOTTOM_UP
    interval_optimization: IntervalOptimization = IntervalOptimization.ON
    extra_verification_ratio: float = 0.1
    verification_algorithm: VerificationAlgorithm = VerificationAlgorithm.HIERARCHICAL
    num_anchors_per_verification_task: int = 3_000
    num_threads: int = DEFAULT_NUM_THREADS

    @field_validator("pex_seed_errors")
    @classmethod
    def _check_seed_errors(cls, value: int) -> int:
        if value < 0:
            raise ValueError("pex_seed_errors must be >= 0")
        return value

    @field_validator(
        "max_num_anchors_hard",
        "max_num_anchors_soft",
        "seed_sampling_step_size",
        "num_anchors_per_verification_task",
        "num_threads",
    )
    @classmethod
    def _check_positive(cls, value: int, info) -> int:
        if value < 1:
            raise ValueError(f"{info.field_name} must be >= 1")
        return value

    @field_validator("extra_verification_ratio")
    @classmethod
    def _check_ratio(cls, value: float) -> float:
        if value < 0:
            raise ValueError("extra_verification_ratio must be >= 0")
        return float(value)


def _check_folder_name(value: str, *, label: str) -> str:
    text = str(value).strip()
    if not _INSTANCE_NAME_RE.match(text):
        raise ValueError(f"{label} must be a folder-safe name (letters, digits, '.', '_', '-'): {value!r}")
    return text


class BenchmarkConfig(FrozenModel):
    """Sweep-level dataset selection shared by every instance of a benchmark."""

    reference: Reference = Reference.HUMAN_GENOME_HG38
    queries: Queries = Queries.HUMAN_WGS_NANOPORE
    tag: Optional[str] = None
    only_analysis: bool = False

    @field_validator("tag")
    @classmethod
    def _check_tag(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _check_folder_name(value, label="tag")


class FloxerConfig(FrozenModel):
    name: str = "unnamed_instance"
    reference: Reference = Reference.HUMAN_GENOME_HG38
    queries: Queries = Queries.HUMAN_WGS_NANOPORE
    only_analysis: bool = False
    algorithm_config: FloxerAlgorithmConfig = Field(default_factory=FloxerAlgorithmConfig)
    cigar_output: CigarOutput = CigarOutput.OFF

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return _check_folder_name(value, label="instance name")

    @classmethod
    def from_benchmark_config(cls, benchmark_config: BenchmarkConfig, **changes: Any) -> "FloxerConfig":
        payload: dict[str, Any] = {
            "reference": benchmark_config.reference,
            "queries": benchmark_config.queries,
            "only_analysis": benchmark_config.only_analysis,
        }
        payload.update(changes)
        return cls.model_validate(payload)

    def with_algorithm(self, **changes: Any) -> "FloxerConfig":
        return self.with_(algorithm_config=self.algorithm_config.with_(**changes))

    def full_name(self, benchmark_name: str) -> str:
        return f"{benchmark_name}__{self.name}"


class MinimapConfig(FrozenModel):
    name: str = "minimap"
    reference: Reference = Reference.HUMAN_GENOME_HG38
    queries: Queries = Queries.HUMAN_WGS_NANOPORE
    index_strategy: IndexStrategy = IndexStrategy.READ_FROM_DISK_IF_STORED
    num_threads: int = DEFAULT_NUM_THREADS

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return _check_folder_name(value, label="instance name")

    @field_validator("num_threads")
    @classmethod
    def _check_threads(cls, value: int) -> int:
        if value < 1:
            raise ValueError("num_threads must be >= 1")
        return value

    @classmethod
    def from_benchmark_config(cls, benchmark_config: BenchmarkConfig, **changes: Any) -> "MinimapConfig":
        payload: dict[str, Any] = {
            "reference": benchmark_config.reference,
            "queries": benchmark_config.queries,
        }
        payload.update(changes)
        return cls.model_validate(payload)
