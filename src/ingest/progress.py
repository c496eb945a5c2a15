"""Persisted collection of repository commit histories and resume bookkeeping."""

from __future__ import annotations

import datetime as dt
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Set

from src.storage import load_json, save_json

from .models import RepoCommitHistory


@dataclass
class ProgressState:
    """Accumulator threaded through the fetch loop.

    `entries` holds the serialized collection exactly as it will be written;
    entries restored from disk are kept verbatim. `processed` also contains
    repositories whose fetch failed, so they are not retried during this run.
    """

    entries: List[Dict[str, Any]] = field(default_factory=list)
    processed: Set[str] = field(default_factory=set)

    def is_processed(self, key: str) -> bool:
        return key in self.processed

    def mark_processed(self, key: str) -> None:
        self.processed.add(key)

    def append(self, history: RepoCommitHistory) -> None:
        if history.repository in self.processed:
            raise ValueError(f"{history.repository} is already in the collection")
        self.entries.append(history.to_dict())
        self.processed.add(history.repository)

    @property
    def saved_count(self) -> int:
        return len(self.entries)


def _quarantine(path: str) -> str:
    stamp = dt.datetime.now(dt.timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    target = f"{path}.corrupt-{stamp}"
    os.replace(path, target)
    return target


def state_from_entries(data: Any) -> ProgressState:
    """Build a state from a decoded collection, dropping unusable entries."""
    state = ProgressState()
    dropped = 0
    for item in data:
        repository = item.get("repository") if isinstance(item, dict) else None
        if not isinstance(repository, str) or not repository or repository in state.processed:
            dropped += 1
            continue
        state.entries.append(item)
        state.processed.add(repository)
    if dropped:
        print(f"[warn] ignored {dropped} malformed or duplicate entries in the existing output")
    return state


def load_progress(path: str) -> ProgressState:
    """Restore prior progress; an unreadable file is moved aside, never overwritten."""
    if not os.path.exists(path):
        return ProgressState()

    print("Found existing output file. Loading previous progress...")
    try:
        data = load_json(path)
    except ValueError:
        data = None
    if not isinstance(data, list):
        moved_to = _quarantine(path)
        print(f"[warn] could not parse existing output file; moved it to {moved_to} and starting from scratch")
        return ProgressState()

    state = state_from_entries(data)
    print(f"Resuming. {len(state.processed)} repositories have already been processed.")
    return state


def save_progress(path: str, state: ProgressState) -> None:
    """Rewrite the whole collection file."""
    save_json(path, state.entries)


__all__ = ["ProgressState", "load_progress", "save_progress", "state_from_entries"]
