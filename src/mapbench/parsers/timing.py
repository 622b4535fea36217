"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/parsers/timing.py

Resource metrics written by GNU time using TIME_TOOL_FORMAT (one TOML
``key = value`` line per metric).
--------------------------------------------------------------------------------
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import field_validator

from mapbench.parsers.toml_artifact import ArtifactModel, loads_toml, read_toml, validate_payload

TIME_TOOL_FORMAT = "\n".join(
    [
        "wall_clock_seconds = %e",
        "user_cpu_seconds = %U",
        "system_cpu_seconds = %S",
        "peak_memory_kilobytes = %M",
        "average_memory_kilobytes = %K",
    ]
)

_LABEL = "timing file"


class ResourceMetrics(ArtifactModel):
    wall_clock_seconds: float
    user_cpu_seconds: float
    system_cpu_seconds: float
    peak_memory_kilobytes: int
    average_memory_kilobytes: Optional[int] = None

    @field_validator("wall_clock_seconds", "user_cpu_seconds", "system_cpu_seconds", "peak_memory_kilobytes")
    @classmethod
    def _check_non_negative(cls, value, info):
        if value < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return value

    @property
    def cpu_seconds(self) -> float:
        return self.user_cpu_seconds + self.system_cpu_seconds

    @property
    def peak_memory_gigabytes(self) -> float:
        return self.peak_memory_kilobytes / 1_000_000


def parse_resource_metrics_text(text: str, *, path: Path | None = None) -> ResourceMetrics:
    payload = loads_toml(text, label=_LABEL, path=path)
    return validate_payload(ResourceMetrics, payload, label=_LABEL, path=path)


def parse_resource_metrics(path: Path) -> ResourceMetrics:
    payload = read_toml(path, label=_LABEL)
    return validate_payload(ResourceMetrics, payload, label=_LABEL, path=path)
