"""Immutable run configuration: CLI flags plus environment settings."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from release_changelog.core.errors import ConfigError

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_HTTP_TIMEOUT = 30.0
DEFAULT_COMMIT = "master"
DEFAULT_PACKAGE_REF = "master"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ReleaseRequest:
    """What to release. Built once from CLI flags, never mutated."""

    owner: str
    repo: str
    registry_url: str
    tag: str = ""
    target_ref: str = ""
    pr_number: int = 0
    commit: str = DEFAULT_COMMIT
    dry_run: bool = False
    kafka_topic: str = ""

    def __post_init__(self) -> None:
        for name in ("owner", "repo", "registry_url"):
            if not getattr(self, name):
                raise ConfigError(f"{name} is a required parameter")
        if self.pr_number < 0:
            raise ConfigError(f"pr must not be negative (got {self.pr_number})")

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class Settings:
    """Environment-derived settings shared by every stage."""

    github_token: str = ""
    kafka_bootstrap_servers: str = ""
    github_api_url: str = DEFAULT_API_URL
    verify_tls: bool = True
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    trigger_timeout: float | None = None
    package_ref: str = DEFAULT_PACKAGE_REF

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Read settings from environment variables.

        Recognised variables:
            TOKEN / GITHUB_TOKEN                 — bearer credential for GitHub
            KAFKA_BOOTSTRAP_SERVERS              — trigger broker list
            RELEASE_CHANGELOG_GITHUB_API_URL     — API root (default: api.github.com)
            RELEASE_CHANGELOG_INSECURE           — 1/true disables TLS verification
            RELEASE_CHANGELOG_HTTP_TIMEOUT       — per-request timeout in seconds
            RELEASE_CHANGELOG_TRIGGER_TIMEOUT    — max seconds to wait for a trigger
            RELEASE_CHANGELOG_PACKAGE_REF        — branch holding package.json
        """
        env = os.environ if environ is None else environ
        insecure = env.get("RELEASE_CHANGELOG_INSECURE", "").strip().lower() in _TRUTHY
        return cls(
            github_token=env.get("TOKEN") or env.get("GITHUB_TOKEN", ""),
            kafka_bootstrap_servers=env.get("KAFKA_BOOTSTRAP_SERVERS", ""),
            github_api_url=env.get("RELEASE_CHANGELOG_GITHUB_API_URL", DEFAULT_API_URL),
            verify_tls=not insecure,
            http_timeout=_env_float(env, "RELEASE_CHANGELOG_HTTP_TIMEOUT") or DEFAULT_HTTP_TIMEOUT,
            trigger_timeout=_env_float(env, "RELEASE_CHANGELOG_TRIGGER_TIMEOUT"),
            package_ref=env.get("RELEASE_CHANGELOG_PACKAGE_REF", DEFAULT_PACKAGE_REF),
        )

    @property
    def trigger_enabled(self) -> bool:
        return bool(self.kafka_bootstrap_servers)


def _env_float(env: Mapping[str, str], key: str) -> float | None:
    raw = env.get(key, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be a number of seconds, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {raw!r}")
    return value
