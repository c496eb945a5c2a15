"""Utilities for loading local (gitignored) credentials."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

DEFAULT_SECRETS_FILENAME = "local_secrets.json"
TOKENS_ENV_VAR = "GITHUB_TOKENS"


def _default_secrets_path() -> Path:
    root = Path(__file__).resolve().parents[1]
    return root / DEFAULT_SECRETS_FILENAME


def load_local_secrets(path: Optional[str | Path] = None) -> Dict[str, Any]:
    """Load secrets from a JSON file; return {} when unavailable or unreadable."""

    candidate = path or os.getenv("LOCAL_SECRETS_FILE") or _default_secrets_path()
    secrets_path = Path(candidate).expanduser()
    if not secrets_path.exists():
        return {}
    try:
        with secrets_path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def split_tokens(raw: Optional[str]) -> List[str]:
    """Split a comma-separated credential string, trimming and dropping blanks."""
    if not raw:
        return []
    return [token.strip() for token in raw.split(",") if token.strip()]


def tokens_from_environment() -> List[str]:
    """Return GITHUB_TOKENS from the environment, else the local secrets file."""
    tokens = split_tokens(os.getenv(TOKENS_ENV_VAR))
    if tokens:
        return tokens
    stored = load_local_secrets().get("github_tokens") or []
    if isinstance(stored, str):
        return split_tokens(stored)
    return [str(token).strip() for token in stored if str(token).strip()]


__all__ = [
    "load_local_secrets",
    "split_tokens",
    "tokens_from_environment",
    "DEFAULT_SECRETS_FILENAME",
    "TOKENS_ENV_VAR",
]
