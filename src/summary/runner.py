"""Entry point for writing the daily and ecosystem summary files."""

from __future__ import annotations

import os
import sys
from typing import Any, Dict, Optional, Tuple

from src.storage import load_json, save_json

from . import config
from .aggregate import summarize


def main(input_path: Optional[str] = None,
         daily_path: Optional[str] = None,
         ecosystem_path: Optional[str] = None) -> Tuple[Dict[str, int], Dict[str, Any]]:
    """Read the commit history collection and write both summaries."""
    input_path = input_path or config.INPUT_FILE_PATH
    daily_path = daily_path or config.DAILY_OUTPUT_PATH
    ecosystem_path = ecosystem_path or config.ECO_OUTPUT_PATH
    print("Starting data summarization...")

    if not os.path.exists(input_path):
        print(f"[error] {input_path} does not exist. Run the ingest first.")
        sys.exit(1)

    collection = load_json(input_path)
    daily, ecosystems = summarize(collection)

    save_json(daily_path, daily)
    print(f"Daily summary saved to {daily_path}")
    save_json(ecosystem_path, ecosystems)
    print(f"Ecosystem summary saved to {ecosystem_path}")
    print("Summarization complete!")
    return daily, ecosystems


if __name__ == "__main__":
    main()
