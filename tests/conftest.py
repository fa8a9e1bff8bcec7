"""Shared pytest fixtures for release-changelog tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest
import structlog

from release_changelog.github.client import GitHubClient
from release_changelog.registry import RegistryClient

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session", autouse=True)
def _quiet_structlog():
    """Route structlog through stdlib logging so nothing lands on stdout."""
    structlog.configure(
        processors=[structlog.processors.KeyValueRenderer()],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    yield
    structlog.reset_defaults()


def _json_response(data: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code=status_code,
        content=json.dumps(data).encode(),
        headers={"content-type": "application/json"},
    )


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Handler) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


@pytest.fixture
def make_github():
    """Build a GitHubClient whose HTTP traffic is served by *handler*."""

    def _make(handler: Handler, token: str = "t0ken") -> tuple[GitHubClient, RecordingTransport]:
        transport = RecordingTransport(handler)
        client = GitHubClient(token, transport=transport)
        return client, transport

    return _make


@pytest.fixture
def make_registry():
    def _make(handler: Handler) -> tuple[RegistryClient, RecordingTransport]:
        transport = RecordingTransport(handler)
        return RegistryClient(transport=transport), transport

    return _make


def _pull_request_payload(
    commits: list[tuple[str, str | None]],
    *,
    base: str = "master",
    title: str = "Release",
) -> dict[str, Any]:
    """GraphQL ``data`` for PULL_REQUEST_QUERY with (headline, login) commits."""
    nodes = []
    for i, (headline, login) in enumerate(commits):
        nodes.append(
            {
                "commit": {
                    "messageHeadline": headline,
                    "abbreviatedOid": f"abc{i:04d}",
                    "author": {"user": {"login": login} if login else None},
                    "associatedPullRequests": {"nodes": [{"number": 42}]},
                }
            }
        )
    return {
        "repository": {
            "name": "widget",
            "pullRequest": {
                "title": title,
                "baseRefName": base,
                "author": {"login": "alice"},
                "baseRefOid": "base0000",
                "headRefOid": "head0000",
                "createdAt": "2024-05-01T10:00:00Z",
                "commits": {"nodes": nodes},
            },
        }
    }


@pytest.fixture
def json_response():
    return _json_response


@pytest.fixture
def pr_payload():
    return _pull_request_payload
