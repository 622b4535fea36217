"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/parsers/toml_artifact.py

Shared loading for the TOML artifacts written by the time wrapper, floxer and
the comparison tool.
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError

from mapbench.errors import ArtifactParseError

ModelT = TypeVar("ModelT", bound=BaseModel)


class ArtifactModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


def loads_toml(text: str, *, label: str, path: Path | None = None) -> dict[str, Any]:
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ArtifactParseError(f"Malformed {label}: {exc}", path=path) from exc


def read_toml(path: Path, *, label: str) -> dict[str, Any]:
    if not path.exists():
        raise ArtifactParseError(f"Missing {label}", path=path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ArtifactParseError(f"{label} is not valid UTF-8: {exc}", path=path) from exc
    return loads_toml(text, label=label, path=path)


def validate_payload(model: type[ModelT], payload: Any, *, label: str, path: Path | None = None) -> ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise ArtifactParseError(f"Invalid {label}: {exc}", path=path) from exc
