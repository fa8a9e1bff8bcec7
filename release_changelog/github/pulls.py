"""Pull request lookup: commit → PR number, PR number → details."""

from __future__ import annotations

import structlog
from pydantic import TypeAdapter

from release_changelog.core.errors import PullRequestNotFoundError, QueryError
from release_changelog.github.client import API_ERRORS, GitHubClient, GraphQLError
from release_changelog.github.queries import PULL_REQUEST_QUERY
from release_changelog.github.schemas import CommitPull, RepositoryData
from release_changelog.models import PullRequestInfo

log = structlog.get_logger("release_changelog.github")

_COMMIT_PULLS = TypeAdapter(list[CommitPull])


async def find_pr_for_commit(client: GitHubClient, owner: str, repo: str, commit: str) -> int:
    """GET /repos/{owner}/{repo}/commits/{commit}/pulls, first PR wins.

    Returns 0 when GitHub associates no pull request with *commit*.
    """
    path = f"/repos/{owner}/{repo}/commits/{commit}/pulls"
    try:
        pulls = _COMMIT_PULLS.validate_python(await client.get(path))
    except API_ERRORS as exc:
        raise QueryError(
            f"listing pull requests for {owner}/{repo}@{commit} failed: "
            f"{GitHubClient.describe_error(exc)}"
        ) from exc

    if not pulls:
        log.info("pulls.none_for_commit", repo=f"{owner}/{repo}", commit=commit)
        return 0

    number = pulls[0].number
    log.info(
        "pulls.located",
        repo=f"{owner}/{repo}",
        commit=commit,
        pr=number,
        candidates=len(pulls),
    )
    return number


async def fetch_pr_details(
    client: GitHubClient, owner: str, repo: str, number: int
) -> PullRequestInfo:
    """Fetch a pull request and its first 50 commits in one GraphQL query."""
    try:
        data = await client.graphql(
            PULL_REQUEST_QUERY, {"owner": owner, "repo": repo, "pr": number}
        )
        parsed = RepositoryData.model_validate(data)
    except API_ERRORS as exc:
        if isinstance(exc, GraphQLError) and exc.not_found:
            raise PullRequestNotFoundError(
                f"pull request {owner}/{repo}#{number} not found: {exc}"
            ) from exc
        raise QueryError(
            f"fetching pull request {owner}/{repo}#{number} failed: "
            f"{GitHubClient.describe_error(exc)}"
        ) from exc

    if parsed.repository is None or parsed.repository.pull_request is None:
        raise PullRequestNotFoundError(f"pull request {owner}/{repo}#{number} not found")

    info = parsed.repository.pull_request.to_info(number)
    log.info(
        "pulls.fetched",
        repo=f"{owner}/{repo}",
        pr=number,
        base=info.base_ref_name,
        commits=len(info.commits),
    )
    return info
