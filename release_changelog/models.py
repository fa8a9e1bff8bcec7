"""Data models for the release pipeline.

These are plain snapshots; nothing here is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class CommitInfo:
    """A single commit of a pull request, in the order GitHub returned it."""

    headline: str
    abbreviated_oid: str
    author_login: str | None = None  # None when the commit has no linked GitHub account
    associated_pr_numbers: frozenset[int] = field(default_factory=frozenset)


@dataclass(frozen=True)
class PullRequestInfo:
    """Read-only view of a pull request and (up to 50 of) its commits."""

    number: int
    title: str
    base_ref_name: str
    base_ref_oid: str
    head_ref_oid: str
    created_at: str
    author_login: str | None = None
    commits: tuple[CommitInfo, ...] = ()


@dataclass(frozen=True)
class ReleaseRecord:
    """The one write this tool performs against GitHub."""

    tag_name: str
    target_commitish: str
    name: str
    body: str

    def to_payload(self) -> dict[str, str]:
        return {
            "tag_name": self.tag_name,
            "target_commitish": self.target_commitish,
            "name": self.name,
            "body": self.body,
        }


@dataclass(frozen=True)
class PublishedRelease:
    """Result of a publish (or dry-run) call."""

    record: ReleaseRecord
    published: bool
    release_id: int | None = None
    html_url: str | None = None


@dataclass(frozen=True)
class ReleaseOutcome:
    """Summary of one orchestration pass."""

    owner: str
    repo: str
    pr_number: int
    release: PublishedRelease

    @property
    def record(self) -> ReleaseRecord:
        return self.release.record

    def summary_line(self) -> str:
        return f"{self.owner}/{self.repo} - {self.record.target_commitish}:{self.record.tag_name}"

    def render(self) -> str:
        """Console output: summary line followed by the changelog body."""
        return self.summary_line() + "\n" + self.record.body
