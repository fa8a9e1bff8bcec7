"""Release creation, real or simulated."""

from __future__ import annotations

import structlog

from release_changelog.core.errors import ConfigError, PublishError
from release_changelog.github.client import API_ERRORS, GitHubClient
from release_changelog.github.schemas import CreatedRelease
from release_changelog.models import PublishedRelease, ReleaseRecord

log = structlog.get_logger("release_changelog.github")


def _check_record(record: ReleaseRecord) -> None:
    if not record.tag_name:
        raise ConfigError("Need to provide tag to publish release")


async def publish(
    client: GitHubClient, owner: str, repo: str, record: ReleaseRecord
) -> PublishedRelease:
    """POST /repos/{owner}/{repo}/releases, a single attempt with no retry.

    Any non-2xx answer, including GitHub's 422 for an existing tag, is a
    :class:`PublishError`.
    """
    _check_record(record)
    try:
        body = await client.post(f"/repos/{owner}/{repo}/releases", record.to_payload())
        created = CreatedRelease.model_validate(body or {})
    except API_ERRORS as exc:
        raise PublishError(
            f"creating release {record.tag_name} on {owner}/{repo} failed: "
            f"{GitHubClient.describe_error(exc)}"
        ) from exc

    log.info(
        "release.published",
        repo=f"{owner}/{repo}",
        tag=record.tag_name,
        target=record.target_commitish,
        release_id=created.id,
        url=created.html_url,
    )
    return PublishedRelease(
        record=record, published=True, release_id=created.id, html_url=created.html_url
    )


def publish_dry_run(record: ReleaseRecord) -> PublishedRelease:
    """Describe the release that would be created, without calling GitHub."""
    _check_record(record)
    log.info(
        "release.dry_run",
        tag=record.tag_name,
        target=record.target_commitish,
        name=record.name,
        body_lines=record.body.count("\n"),
    )
    return PublishedRelease(record=record, published=False)
