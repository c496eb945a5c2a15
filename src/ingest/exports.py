"""Parse the newline-delimited package ecosystem export into repository references."""

from __future__ import annotations

import json
from typing import List, Optional, Tuple
from urllib.parse import urlparse

from .config import ECOSYSTEM_DELIMITER, GITHUB_HOST, UNKNOWN_ECOSYSTEM
from .models import ExportParseStats, RepoReference


def clean_repo_url(url: object) -> Optional[Tuple[str, str]]:
    """Return (owner, repo) for a github.com URL with at least two path segments."""
    if not isinstance(url, str) or not url:
        return None
    try:
        parsed = urlparse(url.strip())
        host = parsed.hostname
    except ValueError:
        return None
    if not parsed.scheme or host != GITHUB_HOST:
        return None

    path = parsed.path[1:] if parsed.path.startswith("/") else parsed.path
    if path.endswith(".git"):
        path = path[: -len(".git")]
    parts = path.split("/")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        return None
    return parts[0], parts[1]


def clean_ecosystem_name(name: object) -> str:
    """Keep the label before the first " - " separator; fall back to "Unknown"."""
    if not isinstance(name, str) or not name:
        return UNKNOWN_ECOSYSTEM
    return name.split(ECOSYSTEM_DELIMITER)[0].strip()


def parse_export_line(line: str, stats: Optional[ExportParseStats] = None) -> Optional[RepoReference]:
    """Turn one export line into a RepoReference, or None when it is unusable."""
    stats = stats if stats is not None else ExportParseStats()
    if not line.strip():
        stats.blank += 1
        return None
    try:
        record = json.loads(line)
    except ValueError:
        stats.invalid_json += 1
        return None
    if not isinstance(record, dict):
        stats.invalid_json += 1
        return None

    cleaned = clean_repo_url(record.get("repo_url"))
    if cleaned is None:
        stats.rejected_url += 1
        return None
    owner, repo = cleaned
    stats.parsed += 1
    return RepoReference(owner=owner, repo=repo, ecosystem=clean_ecosystem_name(record.get("eco_name")))


def read_export(path: str) -> Tuple[List[RepoReference], ExportParseStats]:
    """Stream the export file line by line, keeping file order."""
    print(f"Reading export from {path}... (this may take a moment)")
    stats = ExportParseStats()
    refs: List[RepoReference] = []
    with open(path, "rb") as fh:
        for raw in fh:
            try:
                line = raw.decode("utf-8")
            except UnicodeDecodeError:
                stats.invalid_json += 1
                continue
            ref = parse_export_line(line, stats)
            if ref is not None:
                refs.append(ref)
    return refs, stats


__all__ = ["clean_repo_url", "clean_ecosystem_name", "parse_export_line", "read_export"]
