"""ReleaseOrchestrator: sequences trigger, version, PR lookup, changelog, publish."""

from __future__ import annotations

from collections.abc import Callable

import structlog

from release_changelog.changelog import build_changelog
from release_changelog.core.config import ReleaseRequest, Settings
from release_changelog.core.errors import ConfigError, PullRequestNotFoundError
from release_changelog.github.client import GitHubClient
from release_changelog.github.package import fetch_package_name
from release_changelog.github.pulls import fetch_pr_details, find_pr_for_commit
from release_changelog.github.releases import publish, publish_dry_run
from release_changelog.models import ReleaseOutcome, ReleaseRecord
from release_changelog.registry import RegistryClient, tag_for_version
from release_changelog.trigger import TriggerListener

log = structlog.get_logger("release_changelog.orchestrator")

ListenerFactory = Callable[[str, str], TriggerListener]


class ReleaseOrchestrator:
    """One release pass: each stage runs only if its input is still unknown.

    1. Wait for a trigger message (only if brokers and a topic are configured)
    2. Resolve the tag from the registry (only if no tag was given)
    3. Locate the PR for the base commit (only if no PR number was given)
    4. Fetch the PR's commits and build the changelog
    5. Publish the release, or simulate it in dry-run mode

    Errors propagate unchanged; earlier stages are never undone.
    """

    def __init__(
        self,
        github: GitHubClient,
        registry: RegistryClient,
        settings: Settings,
        *,
        listener_factory: ListenerFactory = TriggerListener,
    ) -> None:
        self._github = github
        self._registry = registry
        self._settings = settings
        self._listener_factory = listener_factory

    async def run(self, request: ReleaseRequest) -> ReleaseOutcome:
        structlog.contextvars.bind_contextvars(repo=request.full_name)
        try:
            return await self._run(request)
        finally:
            structlog.contextvars.unbind_contextvars("repo")

    async def _run(self, request: ReleaseRequest) -> ReleaseOutcome:
        await self._await_trigger(request)

        tag = request.tag or await self._resolve_tag(request)
        pr_number = request.pr_number or await self._locate_pr(request)

        pr = await fetch_pr_details(self._github, request.owner, request.repo, pr_number)
        body = build_changelog(pr.commits)

        if not tag:
            raise ConfigError("Need to provide tag to publish release")

        target = request.target_ref or pr.base_ref_name
        record = ReleaseRecord(tag_name=tag, target_commitish=target, name=tag, body=body)

        if request.dry_run:
            release = publish_dry_run(record)
        else:
            release = await publish(self._github, request.owner, request.repo, record)

        return ReleaseOutcome(
            owner=request.owner, repo=request.repo, pr_number=pr_number, release=release
        )

    # ── stages ─────────────────────────────────────────────────────────────

    async def _await_trigger(self, request: ReleaseRequest) -> None:
        if not (self._settings.trigger_enabled and request.kafka_topic):
            log.debug("trigger.skipped_stage")
            return
        listener = self._listener_factory(
            self._settings.kafka_bootstrap_servers, request.kafka_topic
        )
        await listener.wait_for(request.repo, timeout=self._settings.trigger_timeout)
        log.info("trigger.released", topic=request.kafka_topic)

    async def _resolve_tag(self, request: ReleaseRequest) -> str:
        package = await fetch_package_name(
            self._github, request.owner, request.repo, ref=self._settings.package_ref
        )
        version = await self._registry.resolve_latest_version(request.registry_url, package)
        if not version:
            return ""
        tag = tag_for_version(version)
        log.info("version.resolved", package=package, tag=tag)
        return tag

    async def _locate_pr(self, request: ReleaseRequest) -> int:
        number = await find_pr_for_commit(
            self._github, request.owner, request.repo, request.commit
        )
        if number <= 0:
            raise PullRequestNotFoundError(
                f"no pull request associated with {request.full_name}@{request.commit}"
            )
        return number
