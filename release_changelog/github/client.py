"""Async GitHub API client covering the REST and GraphQL calls we make."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from release_changelog.core.config import DEFAULT_API_URL, DEFAULT_HTTP_TIMEOUT, Settings

log = structlog.get_logger("release_changelog.github")


class GraphQLError(Exception):
    """Raised when a GraphQL response carries an ``errors`` array or no data."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        self.errors = errors
        messages = [str(err.get("message", "unknown error")) for err in errors]
        super().__init__("; ".join(messages) or "unknown GraphQL error")

    @property
    def not_found(self) -> bool:
        return any(err.get("type") == "NOT_FOUND" for err in self.errors)


# Anything a single API call can raise short of a programming error.
# pydantic's ValidationError and json.JSONDecodeError are both ValueErrors.
API_ERRORS: tuple[type[Exception], ...] = (httpx.HTTPError, GraphQLError, ValueError)


class GitHubClient:
    """Thin async wrapper around the GitHub REST and GraphQL APIs.

    No retries: the first failure propagates to the caller.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str = DEFAULT_API_URL,
        verify: bool = True,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            headers["Authorization"] = f"bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            verify=verify,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> GitHubClient:
        if not settings.github_token:
            log.warning("github.no_token")
        return cls(
            settings.github_token,
            base_url=settings.github_api_url,
            verify=settings.verify_tls,
            timeout=settings.http_timeout,
            transport=transport,
        )

    # ── lifecycle ──────────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    # ── public ─────────────────────────────────────────────────────────────

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Single REST GET, returns parsed JSON. Raises on non-2xx."""
        response = await self._client.get(path, params=params)
        response.raise_for_status()
        return response.json()

    async def post(self, path: str, payload: dict[str, Any]) -> Any:
        """Single REST POST with a JSON body, returns parsed JSON. Raises on non-2xx."""
        response = await self._client.post(path, json=payload)
        response.raise_for_status()
        if not response.content:
            return None
        return response.json()

    async def graphql(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Run a GraphQL query and return its ``data`` object.

        GitHub answers GraphQL failures with HTTP 200 and an ``errors``
        array, so those are raised as :class:`GraphQLError`.
        """
        response = await self._client.post(
            "/graphql", json={"query": query, "variables": variables}
        )
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict):
            raise GraphQLError([{"message": "response is not a JSON object"}])
        if body.get("errors"):
            raise GraphQLError(body["errors"])
        data = body.get("data")
        if not isinstance(data, dict):
            raise GraphQLError([{"message": "response carried no data"}])
        return data

    # ── helpers ────────────────────────────────────────────────────────────

    @staticmethod
    def describe_error(exc: Exception) -> str:
        """Human-readable description of an API failure.

        For HTTP status errors, prefers GitHub's own ``message`` and any
        validation ``errors`` (e.g. ``already_exists`` for a duplicate tag).
        """
        if isinstance(exc, httpx.HTTPStatusError):
            status = exc.response.status_code
            try:
                body = exc.response.json()
            except ValueError:
                return f"HTTP {status}"
            if not isinstance(body, dict):
                return f"HTTP {status}"
            message = body.get("message") or f"HTTP {status}"
            codes = [
                str(err.get("code"))
                for err in body.get("errors") or []
                if isinstance(err, dict) and err.get("code")
            ]
            if codes:
                return f"HTTP {status}: {message} ({', '.join(codes)})"
            return f"HTTP {status}: {message}"
        return f"{type(exc).__name__}: {exc}"
