"""JSON file helpers shared by the ingest and summary workflows."""

from __future__ import annotations

import json
import os
import stat
import tempfile
from typing import Any


def ensure_dir(path: str) -> None:
    """Create output directories as-needed without raising for existing folders."""
    if path:
        os.makedirs(path, exist_ok=True)


def load_json(path: str) -> Any:
    """Read and decode a JSON document; decoding errors propagate to the caller."""
    with open(path, "r", encoding="utf-8") as fh:
        return json.load(fh)


def _file_mode(path: str) -> int:
    """Mode for a written file: keep an existing target's mode, else 0o666 minus the umask."""
    if os.path.exists(path):
        return stat.S_IMODE(os.stat(path).st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def save_json(path: str, data: Any) -> None:
    """Write JSON to disk using UTF-8 and deterministic formatting.

    The document is written to a sibling temporary file first and then moved
    over ``path``, so readers only ever see the previous or the new content.
    """
    path = os.fspath(path)
    directory = os.path.dirname(os.path.abspath(path))
    ensure_dir(directory)
    fd, tmp_path = tempfile.mkstemp(prefix=".tmp-", suffix=".json", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.chmod(tmp_path, _file_mode(path))
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


__all__ = ["ensure_dir", "load_json", "save_json"]
