"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/config/load.py
--------------------------------------------------------------------------------
"""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from mapbench.config.schema import MapbenchRoot, SuiteConfig
from mapbench.errors import ConfigError

DEFAULT_CONFIG_NAME = "benchmark_config.yaml"
CONFIG_ENV_VAR = "MAPBENCH_CONFIG"


def _resolve(path: Path | None, base: Path, *, command: bool = False) -> Path | None:
    if path is None:
        return None
    expanded = path.expanduser()
    if expanded.is_absolute():
        return expanded
    # bare command names stay on PATH lookup
    if command and len(expanded.parts) == 1 and not (base / expanded).exists():
        return expanded
    return (base / expanded).resolve()


def _resolve_paths(cfg: SuiteConfig, base: Path) -> SuiteConfig:
    output_folder = cfg.output_folder.expanduser()
    if not output_folder.is_absolute():
        output_folder = (base / output_folder).resolve()
    binaries = cfg.readmapper_binaries.model_copy(
        update={name: _resolve(value, base, command=True) for name, value in cfg.readmapper_binaries}
    )
    references = cfg.reference_paths.model_copy(
        update={name: _resolve(value, base) for name, value in cfg.reference_paths}
    )
    queries = cfg.query_paths.model_copy(update={name: _resolve(value, base) for name, value in cfg.query_paths})
    tools = cfg.tools.model_copy(update={name: _resolve(value, base, command=True) for name, value in cfg.tools})
    return cfg.model_copy(
        update={
            "output_folder": output_folder,
            "compare_aligner_outputs_binary": _resolve(cfg.compare_aligner_outputs_binary, base, command=True),
            "simulated_dataset_binary": _resolve(cfg.simulated_dataset_binary, base, command=True),
            "readmapper_binaries": binaries,
            "reference_paths": references,
            "query_paths": queries,
            "tools": tools,
        }
    )


def load_config(path: Path) -> SuiteConfig:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    raw = yaml.safe_load(path.read_text())
    if not isinstance(raw, dict) or "mapbench" not in raw:
        raise ConfigError(f"Config must have a top-level 'mapbench' mapping: {path}")
    payload = raw.get("mapbench")
    if not isinstance(payload, dict):
        raise ConfigError(f"Config key 'mapbench' must be a mapping: {path}")
    if payload.get("schema_version", 1) != 1:
        raise ConfigError(f"Unsupported schema_version {payload.get('schema_version')!r} (expected 1): {path}")
    try:
        cfg = MapbenchRoot.model_validate(raw).mapbench
    except ValidationError as exc:
        raise ConfigError(f"Invalid config {path}:\n{exc}") from exc
    return _resolve_paths(cfg, path.resolve().parent)
