"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/config/schema.py

Defines the benchmark suite configuration schema: parameters of the harness
that do not change between benchmark runs (binaries, dataset paths, output
root, helper tools).
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mapbench.core.datasets import Queries, Reference
from mapbench.core.params import DEFAULT_ERROR_RATE
from mapbench.errors import ConfigError

logger = logging.getLogger(__name__)

INDEX_FOLDER_NAME = "indices"
ALL_PLOTS_FOLDER_NAME = "all_plots"


class StrictBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ReadmapperBinaries(StrictBaseModel):
    floxer: Path
    minimap: Path


class ReferencePaths(StrictBaseModel):
    human_genome_hg38: Optional[Path] = None
    masked_human_genome_hg38: Optional[Path] = None
    debug: Optional[Path] = None
    simulated: Optional[Path] = None


class QueryPaths(StrictBaseModel):
    human_wgs_nanopore: Optional[Path] = None
    human_wgs_nanopore_small: Optional[Path] = None
    debug: Optional[Path] = None
    problem_query: Optional[Path] = None
    simulated: Optional[Path] = None
    simulated_small: Optional[Path] = None


class ToolPaths(StrictBaseModel):
    time: Path = Path("/usr/bin/time")
    perf: Path = Path("perf")
    flamegraph: Path = Path("flamegraph")
    samply: Optional[Path] = None


class SuiteConfig(StrictBaseModel):
    schema_version: Literal[1] = 1
    output_folder: Path
    compare_aligner_outputs_binary: Optional[Path] = None
    simulated_dataset_binary: Optional[Path] = None
    readmapper_binaries: ReadmapperBinaries
    reference_paths: ReferencePaths = Field(default_factory=ReferencePaths)
    query_paths: QueryPaths = Field(default_factory=QueryPaths)
    tools: ToolPaths = Field(default_factory=ToolPaths)
    comparison_error_rate: float = DEFAULT_ERROR_RATE
    process_timeout_seconds: Optional[float] = Field(
        None,
        description="Optional wall-clock limit per subprocess. Unset means wait indefinitely.",
    )

    @field_validator("comparison_error_rate")
    @classmethod
    def _check_error_rate(cls, value: float) -> float:
        if not 0.0 <= value < 1.0:
            raise ValueError("comparison_error_rate must be in [0, 1)")
        return float(value)

    @field_validator("process_timeout_seconds")
    @classmethod
    def _check_timeout(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("process_timeout_seconds must be > 0 when set")
        return value

    def index_folder(self) -> Path:
        return self.output_folder / INDEX_FOLDER_NAME

    def all_plots_folder(self) -> Path:
        return self.output_folder / ALL_PLOTS_FOLDER_NAME

    def reference_path(self, reference: Reference) -> Path:
        path = getattr(self.reference_paths, reference.value)
        if path is None:
            raise ConfigError(f"No path configured for reference dataset '{reference}' (reference_paths.{reference})")
        return path

    def queries_path(self, queries: Queries) -> Path:
        path = getattr(self.query_paths, queries.value)
        if path is None:
            raise ConfigError(f"No path configured for query dataset '{queries}' (query_paths.{queries})")
        return path

    def setup(self) -> None:
        for folder in (self.index_folder(), self.all_plots_folder()):
            if not folder.exists():
                logger.debug("Creating %s", folder)
                folder.mkdir(parents=True, exist_ok=True)


class MapbenchRoot(StrictBaseModel):
    mapbench: SuiteConfig
