"""Tests for src.ingest.runner covering credentials, resume and the fetch loop.

Run with:
    pytest tests/test_runner.py --maxfail=1 -v --cov=src.ingest.runner --cov-report=term-missing
"""

import datetime as dt
import json
from unittest.mock import MagicMock, patch

import pytest

from src.ingest import runner
from src.ingest.errors import GitHubAPIError, MissingCredentialsError

NOW = dt.datetime(2024, 2, 1, tzinfo=dt.timezone.utc)


def _export(tmp_path, urls):
    path = tmp_path / "exports.json"
    lines = [json.dumps({"repo_url": url, "eco_name": eco}) for url, eco in urls]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return str(path)


def _raw_commit(sha):
    return {"sha": sha, "commit": {"author": {"name": "dev", "date": "2024-01-15T08:00:00Z"}, "message": f"{sha}\nbody"}}


class FakeClient:
    """Stands in for GitHubClient; records which repositories it was asked for."""

    def __init__(self, token, failing=()):
        self.token = token
        self.failing = set(failing)
        self.calls = []

    def list_commits(self, owner, repo, *, since, per_page):
        self.calls.append(f"{owner}/{repo}")
        if f"{owner}/{repo}" in self.failing:
            raise GitHubAPIError(404, "url", "Not Found")
        return [_raw_commit(f"{repo}-1"), _raw_commit(f"{repo}-2")]


def _patch_clients(monkeypatch, failing=()):
    created = []

    def build(tokens):
        created.extend(FakeClient(t, failing) for t in tokens)
        return list(created)

    monkeypatch.setattr(runner, "build_clients", build)
    return created


def test_load_github_tokens_parses_comma_list():
    assert runner.load_github_tokens(" t1, ,t2 ,") == ["t1", "t2"]


@pytest.mark.parametrize("raw", ["", " , "])
def test_load_github_tokens_rejects_empty(raw):
    with pytest.raises(MissingCredentialsError):
        runner.load_github_tokens(raw)


def test_main_exits_without_credentials(tmp_path, monkeypatch):
    monkeypatch.setattr(runner, "tokens_from_environment", lambda: [])
    output = tmp_path / "out.json"
    read = MagicMock()
    monkeypatch.setattr(runner, "read_export", read)
    with pytest.raises(SystemExit) as excinfo:
        runner.main(str(tmp_path / "exports.json"), str(output))
    assert excinfo.value.code == 1
    assert not output.exists()
    read.assert_not_called()


def test_main_fetches_and_rotates_tokens(tmp_path, monkeypatch):
    clients = _patch_clients(monkeypatch)
    export = _export(tmp_path, [
        ("https://github.com/a/one", "npm - web"),
        ("https://gitlab.com/x/y", "npm"),
        ("https://github.com/b/two.git", "PyPI"),
        ("https://github.com/c/three", ""),
    ])
    output = tmp_path / "out.json"

    summary = runner.main(export, str(output), tokens=["t1", "t2"], now=NOW)

    written = json.loads(output.read_text())
    assert [entry["repository"] for entry in written] == ["a/one", "b/two", "c/three"]
    assert [entry["ecosystem"] for entry in written] == ["npm", "PyPI", "Unknown"]
    assert written[0]["commits"][0] == {
        "sha": "one-1", "author": "dev", "date": "2024-01-15T08:00:00Z", "message": "one-1",
    }
    assert clients[0].calls == ["a/one", "c/three"]
    assert clients[1].calls == ["b/two"]
    assert (summary.fetched, summary.skipped, summary.failed) == (3, 0, 0)
    assert summary.export_stats.rejected_url == 1


def test_main_failed_repository_is_not_written_or_retried(tmp_path, monkeypatch):
    clients = _patch_clients(monkeypatch, failing={"a/gone"})
    export = _export(tmp_path, [
        ("https://github.com/a/gone", "npm"),
        ("https://github.com/b/ok", "npm"),
        ("https://github.com/a/gone", "npm"),
    ])
    output = tmp_path / "out.json"

    summary = runner.main(export, str(output), tokens=["t1"], now=NOW)

    assert [e["repository"] for e in json.loads(output.read_text())] == ["b/ok"]
    assert clients[0].calls == ["a/gone", "b/ok"]
    assert (summary.fetched, summary.skipped, summary.failed) == (1, 1, 1)
    assert summary.failures[0].repository == "a/gone"


def test_main_resumes_without_refetching(tmp_path, monkeypatch):
    clients = _patch_clients(monkeypatch)
    prior = [{"repository": "a/one", "ecosystem": "npm", "commits": [{"sha": "old", "kept": True}]}]
    output = tmp_path / "out.json"
    output.write_text(json.dumps(prior))
    export = _export(tmp_path, [
        ("https://github.com/a/one", "npm"),
        ("https://github.com/b/two", "Go"),
    ])

    summary = runner.main(export, str(output), tokens=["t1"], now=NOW)

    written = json.loads(output.read_text())
    assert written[0] == prior[0]
    assert [e["repository"] for e in written] == ["a/one", "b/two"]
    assert clients[0].calls == ["b/two"]
    assert (summary.fetched, summary.skipped) == (1, 1)


def test_second_run_is_idempotent(tmp_path, monkeypatch):
    _patch_clients(monkeypatch)
    export = _export(tmp_path, [("https://github.com/a/one", "npm"), ("https://github.com/b/two", "Go")])
    output = tmp_path / "out.json"

    runner.main(export, str(output), tokens=["t1"], now=NOW)
    first = json.loads(output.read_text())
    summary = runner.main(export, str(output), tokens=["t1"], now=NOW)

    assert json.loads(output.read_text()) == first
    assert summary.fetched == 0 and summary.skipped == 2


def test_each_success_is_saved_before_the_next_fetch(tmp_path, monkeypatch):
    output = tmp_path / "out.json"
    seen_on_disk = []

    class CrashingClient(FakeClient):
        def list_commits(self, owner, repo, *, since, per_page):
            if output.exists():
                seen_on_disk.append([e["repository"] for e in json.loads(output.read_text())])
            if repo == "three":
                raise KeyboardInterrupt
            return super().list_commits(owner, repo, since=since, per_page=per_page)

    monkeypatch.setattr(runner, "build_clients", lambda tokens: [CrashingClient(t) for t in tokens])
    export = _export(tmp_path, [
        ("https://github.com/a/one", "npm"),
        ("https://github.com/b/two", "npm"),
        ("https://github.com/c/three", "npm"),
    ])

    with pytest.raises(KeyboardInterrupt):
        runner.main(export, str(output), tokens=["t1"], now=NOW)

    assert seen_on_disk == [["a/one"], ["a/one", "b/two"]]
    assert [e["repository"] for e in json.loads(output.read_text())] == ["a/one", "b/two"]


@patch("src.ingest.runner.fetch_commits_for_repo")
def test_run_uses_since_window(mock_fetch, tmp_path, monkeypatch):
    monkeypatch.setattr(runner.config, "DAYS_AGO", 30)
    _patch_clients(monkeypatch)
    mock_fetch.return_value = runner.FetchOutcome.failed("a/one", "boom")
    export = _export(tmp_path, [("https://github.com/a/one", "npm")])
    runner.main(export, str(tmp_path / "out.json"), tokens=["t1"], now=NOW)
    assert mock_fetch.call_args.args[2] == "2024-01-02T00:00:00Z"


def test_failed_repository_is_tried_again_on_a_later_run(tmp_path, monkeypatch):
    export = _export(tmp_path, [("https://github.com/a/flaky", "npm")])
    output = tmp_path / "out.json"

    first_clients = _patch_clients(monkeypatch, failing={"a/flaky"})
    first = runner.main(export, str(output), tokens=["t1"], now=NOW)
    assert first.failed == 1
    assert json.loads(output.read_text()) == []

    second_clients = _patch_clients(monkeypatch)
    second = runner.main(export, str(output), tokens=["t1"], now=NOW)
    assert second.fetched == 1
    assert second_clients[0].calls == ["a/flaky"]
    assert first_clients[0].calls == ["a/flaky"]
    assert [e["repository"] for e in json.loads(output.read_text())] == ["a/flaky"]
