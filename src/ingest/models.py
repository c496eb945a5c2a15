"""Record types passed between the ingest stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

FETCHED = "fetched"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass(frozen=True)
class RepoReference:
    """A GitHub repository named by an export record."""

    owner: str
    repo: str
    ecosystem: str

    @property
    def key(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class CommitRecord:
    sha: str
    author: str
    date: Optional[str]
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sha": self.sha,
            "author": self.author,
            "date": self.date,
            "message": self.message,
        }


@dataclass
class RepoCommitHistory:
    """Commits fetched for one repository; `repository` is the collection key."""

    repository: str
    ecosystem: str
    commits: List[CommitRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "repository": self.repository,
            "ecosystem": self.ecosystem,
            "commits": [commit.to_dict() for commit in self.commits],
        }


@dataclass(frozen=True)
class FetchOutcome:
    """Tagged result of handling one repository reference in the fetch loop."""

    status: str
    repository: str
    history: Optional[RepoCommitHistory] = None
    reason: Optional[str] = None

    @classmethod
    def fetched(cls, history: RepoCommitHistory) -> "FetchOutcome":
        return cls(FETCHED, history.repository, history=history)

    @classmethod
    def skipped(cls, repository: str) -> "FetchOutcome":
        return cls(SKIPPED, repository, reason="already processed")

    @classmethod
    def failed(cls, repository: str, reason: str) -> "FetchOutcome":
        return cls(FAILED, repository, reason=reason)


@dataclass
class ExportParseStats:
    """Per-line outcome counters for an export file."""

    parsed: int = 0
    blank: int = 0
    invalid_json: int = 0
    rejected_url: int = 0

    @property
    def dropped(self) -> int:
        return self.invalid_json + self.rejected_url


__all__ = [
    "FETCHED",
    "SKIPPED",
    "FAILED",
    "RepoReference",
    "CommitRecord",
    "RepoCommitHistory",
    "FetchOutcome",
    "ExportParseStats",
]
