"""Error hierarchy for the release pipeline.

Every stage raises a :class:`ReleaseError` subclass; only the CLI catches
them, logs the failure and exits non-zero.
"""


class ReleaseError(Exception):
    """Base exception for all release pipeline failures."""


class ConfigError(ReleaseError):
    """Required input is missing or malformed."""


class RegistryError(ReleaseError):
    """Package registry lookup failed (transport, status or decode)."""


class QueryError(ReleaseError):
    """A GitHub query for pull request data failed."""


class PullRequestNotFoundError(QueryError):
    """No pull request could be resolved for the given commit or number."""


class PublishError(ReleaseError):
    """Creating the release on GitHub failed."""


class TriggerChannelError(ReleaseError):
    """The Kafka trigger channel could not be used."""


class TriggerTimeoutError(TriggerChannelError):
    """No matching trigger message arrived within the configured timeout."""

    def __init__(self, topic: str, repo: str, timeout: float) -> None:
        self.topic = topic
        self.repo = repo
        self.timeout = timeout
        super().__init__(
            f"no message mentioning {repo!r} arrived on {topic!r} within {timeout:g}s"
        )
