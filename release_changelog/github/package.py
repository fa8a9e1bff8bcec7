"""Package name lookup from the repository's ``package.json``."""

from __future__ import annotations

import structlog

from release_changelog.core.config import DEFAULT_PACKAGE_REF
from release_changelog.core.errors import QueryError
from release_changelog.github.client import API_ERRORS, GitHubClient
from release_changelog.github.queries import PACKAGE_JSON_QUERY
from release_changelog.github.schemas import PackageManifest, RepositoryData

log = structlog.get_logger("release_changelog.github")


async def fetch_package_name(
    client: GitHubClient, owner: str, repo: str, ref: str = DEFAULT_PACKAGE_REF
) -> str:
    """Read ``<ref>:package.json`` through GraphQL and return its ``name``."""
    expression = f"{ref}:package.json"
    try:
        data = await client.graphql(
            PACKAGE_JSON_QUERY, {"owner": owner, "repo": repo, "expression": expression}
        )
        parsed = RepositoryData.model_validate(data)
    except API_ERRORS as exc:
        raise QueryError(
            f"reading {expression} from {owner}/{repo} failed: "
            f"{GitHubClient.describe_error(exc)}"
        ) from exc

    repository = parsed.repository
    if repository is None or repository.blob is None or repository.blob.text is None:
        raise QueryError(f"{owner}/{repo} has no {expression}")

    try:
        manifest = PackageManifest.model_validate_json(repository.blob.text)
    except ValueError as exc:
        raise QueryError(f"{owner}/{repo} {expression} is not valid JSON: {exc}") from exc

    if not manifest.name:
        raise QueryError(f"{owner}/{repo} {expression} has no package name")

    log.info("package.resolved", repo=f"{owner}/{repo}", package=manifest.name)
    return manifest.name
