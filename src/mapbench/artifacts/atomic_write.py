"""
--------------------------------------------------------------------------------
<mapbench project>
src/mapbench/artifacts/atomic_write.py

Atomic write helpers for run artifacts, summary tables, manifests and the
most-recent alias.
--------------------------------------------------------------------------------
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any


def _atomic_tmp_path(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f"{path.name}.", suffix=".tmp", dir=path.parent)
    os.close(fd)
    return Path(tmp_name)


def atomic_write_text(path: Path, text: str) -> None:
    tmp_path = _atomic_tmp_path(path)
    try:
        tmp_path.write_text(text)
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def atomic_write_json(
    path: Path,
    payload: Any,
    *,
    indent: int = 2,
    sort_keys: bool = False,
    allow_nan: bool = True,
) -> None:
    text = json.dumps(payload, indent=indent, sort_keys=sort_keys, allow_nan=allow_nan)
    atomic_write_text(path, text)


def atomic_write_parquet(df, path: Path, *, engine: str = "pyarrow", index: bool = False) -> None:
    tmp_path = _atomic_tmp_path(path)
    try:
        df.to_parquet(tmp_path, engine=engine, index=index)
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def atomic_replace_symlink(link_path: Path, target: Path | str) -> None:
    """Point ``link_path`` at ``target``, replacing any previous link in one rename."""
    link_path.parent.mkdir(parents=True, exist_ok=True)
    if link_path.exists() and not link_path.is_symlink():
        raise FileExistsError(f"Refusing to replace non-symlink path: {link_path}")
    tmp_link = link_path.with_name(f".{link_path.name}.{os.getpid()}.tmp")
    tmp_link.unlink(missing_ok=True)
    os.symlink(target, tmp_link)
    try:
        os.replace(tmp_link, link_path)
    finally:
        if tmp_link.is_symlink():
            tmp_link.unlink(missing_ok=True)
