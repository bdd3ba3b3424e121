"""File access for the LifeCompass workspace.

Collections are JSON files that several processes touch at once (the web
UI, the TUI and the reminder scheduler). ``locked_json`` holds an
exclusive ``flock`` on a sibling ``.lock`` file for the whole
read-modify-write, and the write itself goes through a temp file and
``os.replace`` so readers never see a half-written document.
"""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import yaml


def read_text(path: Path) -> str:
    """File contents, or "" when the file does not exist."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""


def _as_mapping(loaded: Any) -> dict[str, Any]:
    return loaded if isinstance(loaded, dict) else {}


def read_json(path: Path) -> dict[str, Any]:
    """Top-level JSON object in *path*; {} for a missing, blank or non-object file."""
    text = read_text(path)
    return _as_mapping(json.loads(text)) if text.strip() else {}


def read_yaml(path: Path) -> dict[str, Any]:
    """Top-level YAML mapping in *path*; {} for a missing, blank or non-mapping file."""
    text = read_text(path)
    return _as_mapping(yaml.safe_load(text)) if text.strip() else {}


def write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    """Replace *path* with *data* in one rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


@contextmanager
def locked_json(path: Path) -> Iterator[dict[str, Any]]:
    """Exclusive read-modify-write of the JSON object in *path*.

    Yields the current object; whatever it holds when the block exits is
    written back. If the block raises, the file is left untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    lock_path = path.with_name(f".{path.name}.lock")
    with open(lock_path, "a", encoding="utf-8") as lock:
        fcntl.flock(lock.fileno(), fcntl.LOCK_EX)
        try:
            data = read_json(path)
            yield data
            write_json_atomic(path, data)
        finally:
            fcntl.flock(lock.fileno(), fcntl.LOCK_UN)
