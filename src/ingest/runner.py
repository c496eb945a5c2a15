"""Entry point for the commit history ingest: export -> GitHub -> JSON collection."""

from __future__ import annotations

import datetime as dt
import sys
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from src.secrets import split_tokens, tokens_from_environment

from . import config
from .collectors import fetch_commits_for_repo, since_timestamp
from .errors import MissingCredentialsError
from .exports import read_export
from .http_client import GitHubClient, build_clients, client_for_index
from .models import FAILED, FETCHED, ExportParseStats, FetchOutcome, RepoReference
from .progress import ProgressState, load_progress, save_progress


@dataclass
class RunSummary:
    """Counts reported at the end of an ingest run."""

    fetched: int = 0
    skipped: int = 0
    failed: int = 0
    failures: List[FetchOutcome] = field(default_factory=list)
    export_stats: ExportParseStats = field(default_factory=ExportParseStats)

    def record(self, outcome: FetchOutcome) -> None:
        if outcome.status == FETCHED:
            self.fetched += 1
        elif outcome.status == FAILED:
            self.failed += 1
            self.failures.append(outcome)
        else:
            self.skipped += 1


def load_github_tokens(raw: Optional[str] = None) -> List[str]:
    """Return configured tokens or raise MissingCredentialsError."""
    tokens = split_tokens(raw) if raw is not None else tokens_from_environment()
    if not tokens:
        raise MissingCredentialsError("GITHUB_TOKENS is not set or contains no valid tokens.")
    return tokens


def process_reference(state: ProgressState,
                      ref: RepoReference,
                      client: GitHubClient,
                      since: str,
                      output_path: str) -> FetchOutcome:
    """Handle one reference and update `state`; successful fetches are saved immediately."""
    if state.is_processed(ref.key):
        return FetchOutcome.skipped(ref.key)

    outcome = fetch_commits_for_repo(client, ref, since)
    if outcome.status == FETCHED and outcome.history is not None:
        state.append(outcome.history)
        save_progress(output_path, state)
    else:
        state.mark_processed(ref.key)
    return outcome


def run(refs: Sequence[RepoReference],
        clients: Sequence[GitHubClient],
        state: ProgressState,
        output_path: str,
        since: str,
        summary: Optional[RunSummary] = None) -> RunSummary:
    """Fetch every unprocessed reference in order, rotating clients round-robin."""
    summary = summary or RunSummary()
    for index, ref in enumerate(refs):
        client = client_for_index(clients, index)
        summary.record(process_reference(state, ref, client, since, output_path))
    save_progress(output_path, state)
    return summary


def main(input_path: Optional[str] = None,
         output_path: Optional[str] = None,
         tokens: Optional[Sequence[str]] = None,
         now: Optional[dt.datetime] = None) -> RunSummary:
    """Run the ingest end to end; exits with status 1 when no credentials exist."""
    input_path = input_path or config.INPUT_FILE_PATH
    output_path = output_path or config.OUTPUT_FILE_PATH
    print("Starting GitHub commit history ingest...")

    try:
        token_list = list(tokens) if tokens else load_github_tokens()
    except MissingCredentialsError as exc:
        print(f"[error] {exc}")
        sys.exit(1)
    print(f"Loaded {len(token_list)} GitHub token(s) for rotation.")
    clients = build_clients(token_list)

    state = load_progress(output_path)
    refs, export_stats = read_export(input_path)
    print(f"Found {len(refs)} total repositories to analyze.")

    summary = RunSummary(export_stats=export_stats)
    run(refs, clients, state, output_path, since_timestamp(now, config.DAYS_AGO), summary)

    print(f"\nProcessed {summary.fetched} new repositories in this session.")
    print(
        f"  skipped {summary.skipped} already processed, {summary.failed} failed; "
        f"export lines: {export_stats.parsed} parsed, {export_stats.dropped} dropped"
    )
    print(f"All data saved to {output_path} ({state.saved_count} repositories).")
    return summary


if __name__ == "__main__":
    main()
