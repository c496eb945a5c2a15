"""Central configuration constants for the commit history ingest workflow."""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()

USER_AGENT = "eco-commit-activity/1.0"
BASE_URL = "https://api.github.com"
GITHUB_HOST = "github.com"
PER_PAGE = 100
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "90"))
MAX_RETRIES = 6
BACKOFF_BASE_SEC = 2
MAX_WAIT_ON_403 = int(os.getenv("MAX_WAIT_ON_403", str(60 * 60)))
MAX_PAGES_COMMITS = int(os.getenv("MAX_PAGES_COMMITS", "1"))  # 0 = no cap
DAYS_AGO = int(os.getenv("COMMIT_LOOKBACK_DAYS", "30"))
UNKNOWN_ECOSYSTEM = "Unknown"
ECOSYSTEM_DELIMITER = " - "
INPUT_FILE_PATH = os.getenv("EXPORTS_FILE", os.path.join("data", "exports.json"))
OUTPUT_FILE_PATH = os.getenv(
    "COMMIT_HISTORY_FILE", os.path.join("data", "exports_commit_history.json")
)

__all__ = [
    "USER_AGENT",
    "BASE_URL",
    "GITHUB_HOST",
    "PER_PAGE",
    "REQUEST_TIMEOUT",
    "MAX_RETRIES",
    "BACKOFF_BASE_SEC",
    "MAX_WAIT_ON_403",
    "MAX_PAGES_COMMITS",
    "DAYS_AGO",
    "UNKNOWN_ECOSYSTEM",
    "ECOSYSTEM_DELIMITER",
    "INPUT_FILE_PATH",
    "OUTPUT_FILE_PATH",
]
