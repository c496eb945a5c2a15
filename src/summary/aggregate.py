"""Fold a commit history collection into per-day and per-ecosystem counts."""

from __future__ import annotations

import datetime as dt
from collections import Counter
from typing import Any, Dict, Iterable, Optional, Tuple


def commit_day(value: Any) -> Optional[str]:
    """Return the UTC calendar day (YYYY-MM-DD) of an ISO 8601 timestamp."""
    if not value or not isinstance(value, str):
        return None
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = dt.datetime.fromisoformat(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed.astimezone(dt.timezone.utc).date().isoformat()


def daily_counts(collection: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    """Count dated commits per day; commits without a usable date are left out."""
    by_day: Counter = Counter()
    for repo_data in collection:
        for commit in repo_data.get("commits") or []:
            day = commit_day((commit or {}).get("date"))
            if day:
                by_day[day] += 1
    return {day: by_day[day] for day in sorted(by_day)}


def ecosystem_totals(collection: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Sum commit counts per ecosystem, dated or not, plus the overall total."""
    totals: Counter = Counter()
    overall = 0
    for repo_data in collection:
        count = len(repo_data.get("commits") or [])
        totals[repo_data.get("ecosystem")] += count
        overall += count
    return {"totals": {eco: totals[eco] for eco in sorted(totals, key=str)}, "overallTotal": overall}


def summarize(collection: Iterable[Dict[str, Any]]) -> Tuple[Dict[str, int], Dict[str, Any]]:
    repos = list(collection)
    return daily_counts(repos), ecosystem_totals(repos)


__all__ = ["commit_day", "daily_counts", "ecosystem_totals", "summarize"]
