"""GitHub access: REST/GraphQL client, PR lookup, release creation."""

from release_changelog.github.client import API_ERRORS, GitHubClient, GraphQLError
from release_changelog.github.package import fetch_package_name
from release_changelog.github.pulls import fetch_pr_details, find_pr_for_commit
from release_changelog.github.releases import publish, publish_dry_run

__all__ = [
    "API_ERRORS",
    "GitHubClient",
    "GraphQLError",
    "fetch_package_name",
    "fetch_pr_details",
    "find_pr_for_commit",
    "publish",
    "publish_dry_run",
]
