"""Exception types raised by the ingest workflow."""

from __future__ import annotations

from typing import Optional


class IngestError(Exception):
    """Base class for ingest failures."""


class MissingCredentialsError(IngestError):
    """Raised when no GitHub token is configured."""


class GitHubAPIError(IngestError):
    """A GitHub REST call finished with a non-success status."""

    def __init__(self, status_code: int, url: str, message: Optional[str] = None) -> None:
        self.status_code = status_code
        self.url = url
        self.message = message or ""
        detail = f": {self.message}" if self.message else ""
        super().__init__(f"HTTP {status_code} for {url}{detail}")


__all__ = ["IngestError", "MissingCredentialsError", "GitHubAPIError"]
