"""release-changelog: cut a GitHub release from a pull request's commits."""

from release_changelog.changelog import build_changelog
from release_changelog.core.config import ReleaseRequest, Settings
from release_changelog.core.errors import (
    ConfigError,
    PublishError,
    PullRequestNotFoundError,
    QueryError,
    RegistryError,
    ReleaseError,
    TriggerChannelError,
    TriggerTimeoutError,
)
from release_changelog.models import (
    CommitInfo,
    PublishedRelease,
    PullRequestInfo,
    ReleaseOutcome,
    ReleaseRecord,
)
from release_changelog.orchestrator import ReleaseOrchestrator

__all__ = [
    "CommitInfo",
    "ConfigError",
    "PublishError",
    "PublishedRelease",
    "PullRequestInfo",
    "PullRequestNotFoundError",
    "QueryError",
    "RegistryError",
    "ReleaseError",
    "ReleaseOrchestrator",
    "ReleaseOutcome",
    "ReleaseRecord",
    "ReleaseRequest",
    "Settings",
    "TriggerChannelError",
    "TriggerTimeoutError",
    "build_changelog",
]
