"""Response schemas for the GitHub payloads we read."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from release_changelog.models import CommitInfo, PullRequestInfo


class _GraphModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Actor(_GraphModel):
    login: str | None = None


class GitActor(_GraphModel):
    user: Actor | None = None


class PullRequestRef(_GraphModel):
    number: int


class PullRequestRefs(_GraphModel):
    nodes: list[PullRequestRef] = Field(default_factory=list)


class CommitNode(_GraphModel):
    message_headline: str
    abbreviated_oid: str
    author: GitActor | None = None
    associated_pull_requests: PullRequestRefs = Field(default_factory=PullRequestRefs)

    def to_info(self) -> CommitInfo:
        login = self.author.user.login if self.author and self.author.user else None
        return CommitInfo(
            headline=self.message_headline,
            abbreviated_oid=self.abbreviated_oid,
            author_login=login,
            associated_pr_numbers=frozenset(
                ref.number for ref in self.associated_pull_requests.nodes
            ),
        )


class PullRequestCommit(_GraphModel):
    commit: CommitNode


class CommitConnection(_GraphModel):
    nodes: list[PullRequestCommit] = Field(default_factory=list)


class PullRequestNode(_GraphModel):
    title: str
    base_ref_name: str
    base_ref_oid: str = ""
    head_ref_oid: str = ""
    created_at: str = ""
    author: Actor | None = None
    commits: CommitConnection = Field(default_factory=CommitConnection)

    def to_info(self, number: int) -> PullRequestInfo:
        return PullRequestInfo(
            number=number,
            title=self.title,
            base_ref_name=self.base_ref_name,
            base_ref_oid=self.base_ref_oid,
            head_ref_oid=self.head_ref_oid,
            created_at=self.created_at,
            author_login=self.author.login if self.author else None,
            commits=tuple(node.commit.to_info() for node in self.commits.nodes),
        )


class Blob(_GraphModel):
    text: str | None = None


class RepositoryNode(_GraphModel):
    name: str | None = None
    pull_request: PullRequestNode | None = None
    blob: Blob | None = Field(default=None, alias="object")


class RepositoryData(_GraphModel):
    repository: RepositoryNode | None = None


class CommitPull(BaseModel):
    """One item of ``GET /repos/{owner}/{repo}/commits/{sha}/pulls``."""

    number: int


class PackageManifest(BaseModel):
    """The part of ``package.json`` we care about."""

    name: str = ""


class CreatedRelease(BaseModel):
    """The part of the create-release response we report back."""

    id: int | None = None
    html_url: str | None = None
