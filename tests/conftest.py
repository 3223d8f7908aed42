#!/usr/bin/env python3
# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Shared fixtures: an in-memory GitHub that GitHubClient talks to through its session.
"""

import base64
from typing import Any, Callable, Dict, List, Optional, Tuple
from unittest.mock import Mock

import pytest

from tepbot.config import BotConfig
from tepbot.constants import BASE_GITHUB_API_URL
from tepbot.tracking.tep_client import TEPClient
from tepbot.utils.github_api_tools import GitHubClient

README_PATH = '/repos/tektoncd/community/contents/teps/README.md'
ISSUES_PATH = '/repos/tektoncd/community/issues'

DEFAULT_README = """# Tekton Enhancement Proposals (TEPs)

| TEP | Title | Status | Last Updated |
|-----|-------|--------|--------------|
|[TEP-1234](1234-something-or-other.md) | Some TEP Title | proposed | 2021-12-20 |
|[TEP-5678](5678-second-one.md) | Some Other TEP Title | implementable | 2021-12-21 |
|[TEP-4321](4321-third-one.md) | Third TEP | implementing | 2021-12-22 |
|[TEP-8765](8765-done.md) | Done TEP | implemented | 2021-12-23 |
"""

Handler = Callable[[Dict[str, Any]], Tuple[int, Any]]


def make_response(status_code: int = 200, json_data: Any = None, headers: Optional[Dict[str, str]] = None) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.headers = headers or {}
    response.json.return_value = json_data
    response.text = '' if json_data is None else str(json_data)
    return response


def content_json(text: str) -> Dict[str, Any]:
    """Body of a GitHub contents API response for a file."""
    return {
        'type': 'file',
        'encoding': 'base64',
        'content': base64.b64encode(text.encode('utf-8')).decode('ascii'),
    }


class FakeGitHub:
    """Routes (method, path) to canned responses or handlers and records every call.

    Unrouted requests get a 404, like a missing resource on GitHub.
    """

    def __init__(self):
        self.headers: Dict[str, str] = {}
        self.routes: Dict[Tuple[str, str], Handler] = {}
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []

    def route(self, method: str, path: str, json_data: Any = None, status: int = 200, handler: Optional[Handler] = None):
        if handler is None:
            handler = lambda kwargs: (status, json_data)  # noqa: E731
        self.routes[(method, path)] = handler

    def file(self, path: str, text: str):
        self.route('GET', path, content_json(text))

    def request(self, method: str, url: str, timeout=None, **kwargs):
        assert url.startswith(BASE_GITHUB_API_URL), url
        path = url[len(BASE_GITHUB_API_URL):]
        self.calls.append((method, path, kwargs))

        handler = self.routes.get((method, path))
        if handler is None:
            return make_response(404, {'message': 'Not Found'})
        status, data = handler(kwargs)
        return make_response(status, data)

    def calls_to(self, method: str, path: Optional[str] = None) -> List[Dict[str, Any]]:
        return [kwargs for m, p, kwargs in self.calls if m == method and (path is None or p == path)]

    @property
    def writes(self) -> List[Tuple[str, str, Dict[str, Any]]]:
        return [call for call in self.calls if call[0] in ('POST', 'PATCH', 'PUT', 'DELETE')]


def make_issue(
    proposal_id: str,
    number: int,
    status: str = 'proposed',
    assignees: Optional[List[str]] = None,
    body: str = '',
) -> Dict[str, Any]:
    """A tracking issue as returned by the issues API."""
    return {
        'number': number,
        'title': f'TEP-{proposal_id} Tracking Issue',
        'state': 'open',
        'assignees': [{'login': login} for login in (assignees or [])],
        'labels': [{'name': 'tep-tracking'}, {'name': f'tep-status/{status}'}],
        'body': body,
    }


@pytest.fixture
def config():
    return BotConfig()


@pytest.fixture
def github():
    return FakeGitHub()


@pytest.fixture
def tep_client(github, config):
    return TEPClient(GitHubClient(token='fake_github_token', session=github), config)
