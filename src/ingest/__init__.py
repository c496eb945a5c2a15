"""Commit history ingest for repositories listed in a package ecosystem export."""

from .runner import RunSummary, main, run

__all__ = ["RunSummary", "main", "run"]
