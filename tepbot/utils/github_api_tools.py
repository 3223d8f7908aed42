# Entrius 2025
import base64
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import bittensor as bt
import requests

from tepbot.classes import IssueComment
from tepbot.constants import (
    BASE_GITHUB_API_URL,
    GITHUB_API_TIMEOUT,
    GITHUB_PAGE_SIZE,
    RATE_LIMIT_MIN_REMAINING,
)
from tepbot.exceptions import FetchError, ParseError, RunCancelled


@dataclass
class RateLimitInfo:
    """Represents GitHub API rate limit information extracted from response headers."""

    limit: int  # Maximum requests allowed per hour
    remaining: int  # Requests remaining in current window
    reset_timestamp: int  # Unix timestamp when the rate limit resets

    @property
    def is_exceeded(self) -> bool:
        return self.remaining == 0

    @property
    def seconds_until_reset(self) -> int:
        return max(0, self.reset_timestamp - int(time.time()))

    def __str__(self) -> str:
        return f"RateLimit(remaining={self.remaining}/{self.limit}, resets_in={self.seconds_until_reset}s)"


def parse_rate_limit_headers(response: requests.Response) -> Optional[RateLimitInfo]:
    """
    Parse GitHub API rate limit information from response headers.

    Args:
        response: The HTTP response from GitHub API

    Returns:
        RateLimitInfo object if headers are present, None otherwise
    """
    headers = response.headers or {}

    try:
        limit = int(headers.get('X-RateLimit-Limit', 0))
        remaining = int(headers.get('X-RateLimit-Remaining', 0))
        reset_timestamp = int(headers.get('X-RateLimit-Reset', 0))
    except (ValueError, TypeError) as e:
        bt.logging.debug(f"Could not parse rate limit headers: {e}")
        return None

    if limit == 0 and reset_timestamp == 0:
        return None
    return RateLimitInfo(limit=limit, remaining=remaining, reset_timestamp=reset_timestamp)


def check_preemptive_rate_limit(response: requests.Response) -> None:
    """Log a warning when we are close to the GitHub rate limit."""
    rate_limit_info = parse_rate_limit_headers(response)

    if rate_limit_info and rate_limit_info.remaining <= RATE_LIMIT_MIN_REMAINING:
        bt.logging.warning(
            f"Approaching GitHub API rate limit: {rate_limit_info.remaining} requests remaining, "
            f"resets in {rate_limit_info.seconds_until_reset}s"
        )


def make_headers(token: str) -> Dict[str, str]:
    """Build standard GitHub HTTP headers for a PAT.

    Args:
        token (str): Github pat
    Returns:
        Dict[str, str]: Mapping of HTTP header names to values.
    """
    headers = {"Accept": "application/vnd.github.v3+json"}
    if token:
        headers["Authorization"] = f"token {token}"
    return headers


class GitHubClient:
    """Blocking GitHub REST client covering the endpoints the bot needs.

    Every call is a single round trip: there are no retries, and any failure
    (including rate limiting) surfaces as a FetchError. If ``cancel_event`` is
    set, the next request raises RunCancelled instead of going out.
    """

    def __init__(
        self,
        token: str = '',
        session: Optional[requests.Session] = None,
        base_url: str = BASE_GITHUB_API_URL,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.session = session if session is not None else requests.Session()
        self.session.headers.update(make_headers(token))
        self.cancel_event = cancel_event

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise RunCancelled(f"run cancelled before {method} {path}")

        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=GITHUB_API_TIMEOUT, **kwargs)
        except requests.exceptions.RequestException as e:
            raise FetchError(f"{method} {url} failed: {e}", url=url) from e

        if response.status_code >= 400:
            rate_limit_info = parse_rate_limit_headers(response)
            if response.status_code in (403, 429) and rate_limit_info and rate_limit_info.is_exceeded:
                message = f"{method} {url} was rate limited ({rate_limit_info})"
            else:
                message = f"{method} {url} returned status {response.status_code}"
            raise FetchError(message, status_code=response.status_code, url=url)

        check_preemptive_rate_limit(response)
        return response

    def _paginate(self, path: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        page = 1
        while True:
            response = self._request('GET', path, params={**params, 'per_page': GITHUB_PAGE_SIZE, 'page': page})
            batch = response.json() or []
            items.extend(batch)
            if len(batch) < GITHUB_PAGE_SIZE:
                return items
            page += 1

    # -------------------------------------------------------------------------
    # Contents
    # -------------------------------------------------------------------------

    def get_file_contents(self, owner: str, repo: str, path: str, ref: Optional[str] = None) -> str:
        """Fetch a file through the contents API and return its decoded text."""
        params = {'ref': ref} if ref else None
        response = self._request('GET', f"/repos/{owner}/{repo}/contents/{path}", params=params)
        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(f"{owner}/{repo}/{path}: response is not JSON: {e}") from e

        # Directories come back as a list of entries
        if not isinstance(data, dict) or data.get('content') is None:
            raise FetchError(f"{owner}/{repo}/{path} is not a file (is it a directory?)")

        content = data['content']
        if data.get('encoding', 'base64') != 'base64':
            return content
        try:
            return base64.b64decode(content).decode('utf-8')
        except ValueError as e:
            raise ParseError(f"{owner}/{repo}/{path} is not valid base64-encoded UTF-8: {e}") from e

    # -------------------------------------------------------------------------
    # Issues
    # -------------------------------------------------------------------------

    def list_issues(self, owner: str, repo: str, labels: Optional[List[str]] = None, state: str = 'open') -> List[Dict[str, Any]]:
        """List issues, skipping pull requests (which the issues endpoint also returns)."""
        params: Dict[str, Any] = {'state': state}
        if labels:
            params['labels'] = ','.join(labels)
        issues = self._paginate(f"/repos/{owner}/{repo}/issues", params)
        return [issue for issue in issues if 'pull_request' not in issue]

    def create_issue(
        self, owner: str, repo: str, title: str, body: str, labels: List[str], assignees: List[str]
    ) -> Dict[str, Any]:
        payload = {'title': title, 'body': body, 'labels': labels, 'assignees': assignees}
        return self._request('POST', f"/repos/{owner}/{repo}/issues", json=payload).json()

    def update_issue(self, owner: str, repo: str, number: int, body: str, labels: List[str]) -> Dict[str, Any]:
        payload = {'body': body, 'labels': labels}
        return self._request('PATCH', f"/repos/{owner}/{repo}/issues/{number}", json=payload).json()

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------

    def list_comments(self, owner: str, repo: str, number: int) -> List[IssueComment]:
        comments = self._paginate(f"/repos/{owner}/{repo}/issues/{number}/comments", {})
        return [IssueComment.from_github_response(c) for c in comments]

    def create_comment(self, owner: str, repo: str, number: int, body: str) -> IssueComment:
        data = self._request('POST', f"/repos/{owner}/{repo}/issues/{number}/comments", json={'body': body}).json()
        return IssueComment(id=data.get('id', 0), body=data.get('body', body), user=(data.get('user') or {}).get('login'))

    def edit_comment(self, owner: str, repo: str, comment_id: int, body: str) -> IssueComment:
        data = self._request('PATCH', f"/repos/{owner}/{repo}/issues/comments/{comment_id}", json={'body': body}).json()
        return IssueComment(id=data.get('id', comment_id), body=data.get('body', body), user=(data.get('user') or {}).get('login'))
