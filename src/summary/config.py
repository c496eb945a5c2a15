"""Paths used by the summary workflow."""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

INPUT_FILE_PATH = os.getenv(
    "COMMIT_HISTORY_FILE", os.path.join("data", "exports_commit_history.json")
)
DAILY_OUTPUT_PATH = os.getenv("DAILY_SUMMARY_FILE", os.path.join("public", "daily_summary.json"))
ECO_OUTPUT_PATH = os.getenv("ECOSYSTEM_SUMMARY_FILE", os.path.join("public", "ecosystem_summary.json"))

__all__ = ["INPUT_FILE_PATH", "DAILY_OUTPUT_PATH", "ECO_OUTPUT_PATH"]
