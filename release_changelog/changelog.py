"""Changelog assembly: pure formatting, no I/O."""

from __future__ import annotations

from collections.abc import Iterable

from release_changelog.models import CommitInfo

# GitHub shows commits from deleted or unlinked accounts as "ghost".
PLACEHOLDER_LOGIN = "ghost"


def format_line(commit: CommitInfo) -> str:
    """Render one commit as ``* <headline> @<login>``."""
    login = commit.author_login or PLACEHOLDER_LOGIN
    return f"* {commit.headline} @{login}"


def build_changelog(commits: Iterable[CommitInfo]) -> str:
    """Build the release body, one newline-terminated line per commit.

    Input order is kept as-is; the same commits always yield the same text.
    """
    return "".join(format_line(commit) + "\n" for commit in commits)
