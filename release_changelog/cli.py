"""CLI entry point: release-changelog.

    release-changelog --owner acme --repo widget --registry https://registry.npmjs.org
    release-changelog --owner acme --repo widget --registry ... --pr 42 --tag v1.0.2 --dry-run
"""

from __future__ import annotations

import asyncio
import dataclasses
import sys

import click
import structlog

from release_changelog.core.config import DEFAULT_COMMIT, ReleaseRequest, Settings
from release_changelog.core.errors import ReleaseError
from release_changelog.core.logging import setup_logging
from release_changelog.github.client import GitHubClient
from release_changelog.models import ReleaseOutcome
from release_changelog.orchestrator import ReleaseOrchestrator
from release_changelog.registry import RegistryClient

log = structlog.get_logger("release_changelog.cli")


async def _run(settings: Settings, request: ReleaseRequest) -> ReleaseOutcome:
    async with GitHubClient.from_settings(settings) as github, RegistryClient.from_settings(
        settings
    ) as registry:
        orchestrator = ReleaseOrchestrator(github, registry, settings)
        return await orchestrator.run(request)


def _load_settings(insecure: bool, trigger_timeout: float | None) -> Settings:
    settings = Settings.from_env()
    overrides: dict[str, object] = {}
    if insecure:
        overrides["verify_tls"] = False
    if trigger_timeout is not None:
        overrides["trigger_timeout"] = trigger_timeout
    if overrides:
        settings = dataclasses.replace(settings, **overrides)
    if not settings.verify_tls:
        log.warning("http.tls_verification_disabled")
    return settings


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--repo", required=True, help="GitHub repository to release (required)")
@click.option("--owner", required=True, help="GitHub owner of the repository (required)")
@click.option("--registry", required=True, help="npm registry URL (required)")
@click.option("--tag", default="", help="Release tag name (e.g. v1.0.2)")
@click.option("--targetRef", "target_ref", default="", help="Target ref to tag")
@click.option("--pr", "pr_number", type=int, default=0, help="Pull request to release")
@click.option(
    "--commit",
    default=DEFAULT_COMMIT,
    show_default=True,
    help="Commit ref used to find the pull request",
)
@click.option("--dry-run", is_flag=True, help="Show what the release would look like w/o publishing")
@click.option("--kafka-topic", default="", help="Kafka topic to wait on before releasing")
@click.option(
    "--trigger-timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Give up waiting for the Kafka trigger after this many seconds",
)
@click.option("--insecure", is_flag=True, help="Skip TLS certificate verification")
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
def main(
    repo: str,
    owner: str,
    registry: str,
    tag: str,
    target_ref: str,
    pr_number: int,
    commit: str,
    dry_run: bool,
    kafka_topic: str,
    trigger_timeout: float | None,
    insecure: bool,
    verbose: bool,
) -> None:
    """Cut a GitHub release whose notes list the commits of a pull request."""
    setup_logging(verbose)

    try:
        settings = _load_settings(insecure, trigger_timeout)
        request = ReleaseRequest(
            owner=owner,
            repo=repo,
            registry_url=registry,
            tag=tag,
            target_ref=target_ref,
            pr_number=pr_number,
            commit=commit,
            dry_run=dry_run,
            kafka_topic=kafka_topic,
        )
        outcome = asyncio.run(_run(settings, request))
    except ReleaseError as exc:
        log.error("release.failed", error=str(exc), kind=type(exc).__name__)
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(outcome.render(), nl=False)


if __name__ == "__main__":
    main()
