"""Fetch and project recent commits for one repository."""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Optional

import requests

from .config import DAYS_AGO, PER_PAGE
from .errors import GitHubAPIError
from .http_client import GitHubClient
from .models import CommitRecord, FetchOutcome, RepoCommitHistory, RepoReference

UNKNOWN_AUTHOR = "Unknown"


def one_line(msg: Optional[str]) -> str:
    """Return the first line of a commit message."""
    if not msg:
        return ""
    return msg.split("\n", 1)[0]


def since_timestamp(now: Optional[dt.datetime] = None, days: int = DAYS_AGO) -> str:
    """UTC timestamp `days` before `now`, formatted the way the API expects."""
    now = now or dt.datetime.now(dt.timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=dt.timezone.utc)
    since = now.astimezone(dt.timezone.utc) - dt.timedelta(days=days)
    return since.strftime("%Y-%m-%dT%H:%M:%SZ")


def project_commit(raw: Dict[str, Any]) -> CommitRecord:
    """Reduce a REST commit object to sha, author name, author date and subject."""
    commit = raw.get("commit") or {}
    author = commit.get("author") or {}
    return CommitRecord(
        sha=raw["sha"],
        author=author.get("name") or UNKNOWN_AUTHOR,
        date=author.get("date") or None,
        message=one_line(commit.get("message")),
    )


def fetch_commits_for_repo(client: GitHubClient, ref: RepoReference, since: str) -> FetchOutcome:
    """Fetch one page of commits since `since`; failures become a tagged outcome."""
    print(f" - Fetching commits for {ref.key}...")
    try:
        raw_commits = client.list_commits(ref.owner, ref.repo, since=since, per_page=PER_PAGE)
        commits = [project_commit(raw) for raw in raw_commits]
    except (requests.RequestException, GitHubAPIError, KeyError, TypeError, AttributeError, ValueError) as exc:
        print(f"   [warn] could not fetch commits for {ref.key}: {exc}")
        return FetchOutcome.failed(ref.key, str(exc))
    history = RepoCommitHistory(repository=ref.key, ecosystem=ref.ecosystem, commits=commits)
    return FetchOutcome.fetched(history)


__all__ = ["one_line", "since_timestamp", "project_commit", "fetch_commits_for_repo", "UNKNOWN_AUTHOR"]
