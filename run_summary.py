"""Convenience shim to write the daily and ecosystem summaries."""

from __future__ import annotations

from src.summary.runner import main as summary_main


if __name__ == "__main__":
    summary_main()
