"""GitHub REST client with rate-limit aware retry/backoff for the ingest workflow."""

from __future__ import annotations

import os
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

from . import config
from .errors import GitHubAPIError

# (retry_after_seconds, client) -> True to wait and retry the same request
ThrottleHook = Callable[[int, "GitHubClient"], bool]

TERMINAL_ERRORS = {400, 401, 404, 409, 410, 422, 451}


def sleep_with_jitter(base: float) -> None:
    """Pause execution with +/- 25% jitter to avoid synchronized retries."""
    jitter = base * 0.25 * (0.5 - (os.urandom(1)[0] / 255.0))
    time.sleep(max(0.0, base + jitter))


def log_http_error(resp: requests.Response, url: str) -> None:
    """Print a short, human-readable message when GitHub returns an error."""
    print(f"[error] HTTP {resp.status_code} for {url}\n  -> {error_message(resp)}")


def error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        body = {"text": (resp.text or "")[:300]}
    return str(body.get("message") or body.get("error") or body.get("text") or "")


def default_on_rate_limit(retry_after: int, client: "GitHubClient") -> bool:
    print(f"[rate-limit] token {client.label} hit rate limit. Retrying after {retry_after} seconds...")
    return True


def default_on_secondary_rate_limit(retry_after: int, client: "GitHubClient") -> bool:
    print(f"[rate-limit] token {client.label} hit abuse detection. Retrying after {retry_after} seconds...")
    return True


def _retry_after_seconds(headers: Dict[str, str], attempt: int) -> int:
    retry_after = headers.get("Retry-After")
    reset = headers.get("X-RateLimit-Reset")
    if retry_after and str(retry_after).isdigit():
        wait_sec = int(retry_after)
    elif reset and str(reset).isdigit():
        wait_sec = max(0, int(reset) - int(time.time())) + 1
    else:
        wait_sec = config.BACKOFF_BASE_SEC * (2 ** (attempt - 1))
    return min(wait_sec, config.MAX_WAIT_ON_403)


class GitHubClient:
    """One authenticated session per token; throttling is handled per request."""

    def __init__(self,
                 token: str,
                 *,
                 on_rate_limit: ThrottleHook = default_on_rate_limit,
                 on_secondary_rate_limit: ThrottleHook = default_on_secondary_rate_limit,
                 session: Optional[requests.Session] = None) -> None:
        self.token = token
        self.on_rate_limit = on_rate_limit
        self.on_secondary_rate_limit = on_secondary_rate_limit
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": config.USER_AGENT,
                "Authorization": f"token {token}",
            }
        )

    @property
    def label(self) -> str:
        """First characters of the token, safe to print."""
        return f"'{self.token[:8]}'"

    def _throttle_hook(self, resp: requests.Response) -> Optional[ThrottleHook]:
        headers = resp.headers or {}
        if headers.get("X-RateLimit-Remaining") == "0":
            return self.on_rate_limit
        if resp.status_code == 429 or headers.get("Retry-After"):
            return self.on_secondary_rate_limit
        if "secondary rate limit" in error_message(resp).lower():
            return self.on_secondary_rate_limit
        return None

    def request_with_backoff(self, method: str, url: str, **kwargs) -> requests.Response:
        """Perform a REST call with retry, exponential backoff and throttle hooks."""
        timeout = kwargs.pop("timeout", config.REQUEST_TIMEOUT)
        last_exc: Optional[Exception] = None
        resp: Optional[requests.Response] = None

        for attempt in range(1, config.MAX_RETRIES + 1):
            try:
                resp = self.session.request(method, url, timeout=timeout, **kwargs)
            except requests.RequestException as exc:
                delay = config.BACKOFF_BASE_SEC * (2 ** (attempt - 1))
                print(f"[retry {attempt}/{config.MAX_RETRIES}] {exc} -> sleep {delay:.1f}s")
                sleep_with_jitter(delay)
                last_exc = exc
                resp = None
                continue

            if 200 <= resp.status_code < 300:
                return resp

            if resp.status_code in (403, 429):
                hook = self._throttle_hook(resp)
                if hook is not None:
                    if attempt >= config.MAX_RETRIES:
                        return resp
                    wait_sec = _retry_after_seconds(resp.headers or {}, attempt)
                    if not hook(wait_sec, self):
                        return resp
                    print(f"[backoff {resp.status_code}] waiting {wait_sec}s for {url}")
                    time.sleep(wait_sec)
                    continue
                log_http_error(resp, url)
                return resp

            if resp.status_code in TERMINAL_ERRORS:
                return resp

            if attempt < config.MAX_RETRIES:
                delay = config.BACKOFF_BASE_SEC * (2 ** (attempt - 1))
                print(f"[retry {attempt}/{config.MAX_RETRIES}] HTTP {resp.status_code} -> sleep {delay:.1f}s")
                sleep_with_jitter(delay)
                continue

            return resp

        if resp is not None:
            return resp
        if last_exc:
            raise last_exc
        raise GitHubAPIError(0, url, "request failed after retries")

    def paged_get(self, url: str, params: Optional[Dict[str, Any]] = None, *,
                  max_pages: int = 0) -> List[Dict[str, Any]]:
        """Retrieve pages until a short or empty page, or until max_pages is hit."""
        results: List[Dict[str, Any]] = []
        page = 1
        while True:
            if max_pages and page > max_pages:
                break
            query = dict(params or {})
            query.setdefault("per_page", config.PER_PAGE)
            query["page"] = page
            resp = self.request_with_backoff("GET", url, params=query)
            if resp.status_code != 200:
                raise GitHubAPIError(resp.status_code, url, error_message(resp))

            batch = resp.json()
            if not isinstance(batch, list):
                raise GitHubAPIError(resp.status_code, url, "expected a JSON array")
            results.extend(batch)

            if len(batch) < query["per_page"]:
                break
            page += 1
        return results

    def list_commits(self, owner: str, repo: str, *, since: str,
                     per_page: int = config.PER_PAGE,
                     max_pages: Optional[int] = None) -> List[Dict[str, Any]]:
        """List raw commit objects for a repository authored on or after `since`."""
        url = f"{config.BASE_URL}/repos/{owner}/{repo}/commits"
        pages = config.MAX_PAGES_COMMITS if max_pages is None else max_pages
        return self.paged_get(url, {"since": since, "per_page": per_page}, max_pages=pages)


def build_clients(tokens: Sequence[str]) -> List[GitHubClient]:
    return [GitHubClient(token) for token in tokens]


def client_for_index(clients: Sequence[GitHubClient], index: int) -> GitHubClient:
    """Round-robin selection: the i-th work item uses client i mod N."""
    if not clients:
        raise ValueError("at least one client is required")
    return clients[index % len(clients)]


__all__ = [
    "GitHubClient",
    "ThrottleHook",
    "build_clients",
    "client_for_index",
    "default_on_rate_limit",
    "default_on_secondary_rate_limit",
    "error_message",
    "log_http_error",
    "sleep_with_jitter",
]
