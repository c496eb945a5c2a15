"""Convenience shim to run only the commit history ingest."""

from __future__ import annotations

from src.ingest.runner import main as ingest_main


if __name__ == "__main__":
    ingest_main()
