"""Tests for the release-changelog CLI."""

from __future__ import annotations

import json
import logging
import os
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from click.testing import CliRunner

from release_changelog.cli import _load_settings, main
from release_changelog.github.client import GitHubClient
from release_changelog.registry import RegistryClient
from release_changelog.core.errors import PublishError, QueryError
from release_changelog.models import PublishedRelease, ReleaseOutcome, ReleaseRecord

_REQUIRED = ["--owner", "acme", "--repo", "widget", "--registry", "https://registry.example.com"]


def _outcome(published: bool = True) -> ReleaseOutcome:
    record = ReleaseRecord(
        tag_name="v2.3.0",
        target_commitish="master",
        name="v2.3.0",
        body="* fix bug @alice\n* add test @bob\n",
    )
    return ReleaseOutcome(
        owner="acme",
        repo="widget",
        pr_number=42,
        release=PublishedRelease(record=record, published=published),
    )


def _invoke(args: list[str], run_result=None, env: dict[str, str] | None = None):
    runner = CliRunner()
    if isinstance(run_result, Exception):
        run = AsyncMock(side_effect=run_result)
    else:
        run = AsyncMock(return_value=run_result)
    with patch("release_changelog.cli.setup_logging"), patch("release_changelog.cli._run", run):
        result = runner.invoke(main, args, env=env or {})
    return result, run


class TestRequiredFlags:
    def test_missing_repo(self):
        result, run = _invoke(["--owner", "acme", "--registry", "https://r"])
        assert result.exit_code == 2
        assert "--repo" in result.output
        run.assert_not_called()

    def test_missing_registry(self):
        result, run = _invoke(["--owner", "acme", "--repo", "widget"])
        assert result.exit_code == 2
        run.assert_not_called()

    def test_empty_owner_is_config_error(self):
        result, run = _invoke(["--owner", "", "--repo", "widget", "--registry", "https://r"])
        assert result.exit_code == 1
        assert "owner is a required parameter" in result.output
        run.assert_not_called()


class TestRun:
    def test_prints_summary_and_changelog(self):
        result, _ = _invoke(_REQUIRED, _outcome())
        assert result.exit_code == 0, result.output
        assert "acme/widget - master:v2.3.0\n* fix bug @alice\n* add test @bob\n" in result.output

    def test_builds_request_from_flags(self):
        args = _REQUIRED + [
            "--tag", "v1.0.2",
            "--targetRef", "release/1.x",
            "--pr", "42",
            "--commit", "abc123",
            "--dry-run",
            "--kafka-topic", "npm-published",
        ]
        result, run = _invoke(args, _outcome(published=False))
        assert result.exit_code == 0, result.output
        settings, request = run.call_args.args
        assert request.owner == "acme"
        assert request.repo == "widget"
        assert request.registry_url == "https://registry.example.com"
        assert request.tag == "v1.0.2"
        assert request.target_ref == "release/1.x"
        assert request.pr_number == 42
        assert request.commit == "abc123"
        assert request.dry_run is True
        assert request.kafka_topic == "npm-published"

    def test_defaults(self):
        result, run = _invoke(_REQUIRED, _outcome())
        assert result.exit_code == 0, result.output
        settings, request = run.call_args.args
        assert request.commit == "master"
        assert request.pr_number == 0
        assert request.dry_run is False
        assert settings.verify_tls is True

    def test_env_settings(self):
        env = {"TOKEN": "abc", "KAFKA_BOOTSTRAP_SERVERS": "broker:9092"}
        result, run = _invoke(_REQUIRED, _outcome(), env=env)
        assert result.exit_code == 0, result.output
        settings, _ = run.call_args.args
        assert settings.github_token == "abc"
        assert settings.kafka_bootstrap_servers == "broker:9092"

    def test_invalid_pr(self):
        result, run = _invoke(_REQUIRED + ["--pr", "abc"])
        assert result.exit_code == 2
        run.assert_not_called()


class TestErrors:
    def test_stage_failure_exits_nonzero(self):
        result, _ = _invoke(_REQUIRED, QueryError("fetching pull request acme/widget#42 failed"))
        assert result.exit_code == 1
        assert "Error: fetching pull request acme/widget#42 failed" in result.output

    def test_publish_failure(self):
        result, _ = _invoke(_REQUIRED + ["--tag", "v1"], PublishError("HTTP 422"))
        assert result.exit_code == 1
        assert "HTTP 422" in result.output

    def test_bad_env_timeout(self):
        result, run = _invoke(_REQUIRED, _outcome(), env={"RELEASE_CHANGELOG_HTTP_TIMEOUT": "x"})
        assert result.exit_code == 1
        run.assert_not_called()


class TestLoadSettings:
    def test_insecure_flag(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _load_settings(insecure=True, trigger_timeout=None).verify_tls is False

    def test_trigger_timeout_flag_overrides_env(self):
        with patch.dict(os.environ, {"RELEASE_CHANGELOG_TRIGGER_TIMEOUT": "10"}, clear=True):
            settings = _load_settings(insecure=False, trigger_timeout=2.5)
        assert settings.trigger_timeout == 2.5

    def test_env_timeout_kept_without_flag(self):
        with patch.dict(os.environ, {"RELEASE_CHANGELOG_TRIGGER_TIMEOUT": "10"}, clear=True):
            settings = _load_settings(insecure=False, trigger_timeout=None)
        assert settings.trigger_timeout == 10.0


class _Clients:
    """Wraps the real ``from_settings`` constructors so HTTP goes to in-memory handlers."""

    def __init__(self, json_response, pr_payload) -> None:
        self.json_response = json_response
        self.pr_data = pr_payload([("fix bug", "alice"), ("add test", "bob")], base="main")
        self.settings = []
        self.github: list[GitHubClient] = []
        self.registry: list[RegistryClient] = []
        self.requests: list[str] = []
        self.publish_status = 201
        self._github_from_settings = GitHubClient.from_settings
        self._registry_from_settings = RegistryClient.from_settings

    def github_handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append(f"{request.method} {path}")
        if path == "/graphql":
            body = json.loads(request.content)
            if body["variables"].get("expression", "").endswith("package.json"):
                text = json.dumps({"name": "widget"})
                return self.json_response({"data": {"repository": {"object": {"text": text}}}})
            return self.json_response({"data": self.pr_data})
        if path == "/repos/acme/widget/commits/master/pulls":
            return self.json_response([{"number": 42}])
        if path == "/repos/acme/widget/releases":
            if self.publish_status >= 400:
                return self.json_response(
                    {"message": "Validation Failed", "errors": [{"code": "already_exists"}]},
                    self.publish_status,
                )
            return self.json_response(
                {"id": 7, "html_url": "https://github.com/acme/widget/releases/v2.3.0"},
                self.publish_status,
            )
        raise AssertionError(f"unexpected request {request.method} {request.url}")

    def registry_handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(f"{request.method} {request.url}")
        return self.json_response({"name": "widget", "dist-tags": {"latest": "2.3.0"}})

    def make_github(self, settings):
        self.settings.append(settings)
        client = self._github_from_settings(
            settings, transport=httpx.MockTransport(self.github_handler)
        )
        self.github.append(client)
        return client

    def make_registry(self, settings):
        client = self._registry_from_settings(
            settings, transport=httpx.MockTransport(self.registry_handler)
        )
        self.registry.append(client)
        return client

    def invoke(self, args: list[str]):
        env = {
            "TOKEN": "t0ken",
            "KAFKA_BOOTSTRAP_SERVERS": None,
            "RELEASE_CHANGELOG_INSECURE": None,
        }
        with (
            patch("release_changelog.cli.setup_logging"),
            patch.object(GitHubClient, "from_settings", self.make_github),
            patch.object(RegistryClient, "from_settings", self.make_registry),
        ):
            return CliRunner().invoke(main, args, env=env)


@pytest.fixture
def clients(json_response, pr_payload):
    return _Clients(json_response, pr_payload)


class TestEndToEnd:
    """Real orchestration over in-memory HTTP transports."""

    def test_full_run(self, clients, caplog):
        with caplog.at_level(logging.WARNING):
            result = clients.invoke(_REQUIRED)
        assert result.exit_code == 0, result.output
        assert result.output == "acme/widget - main:v2.3.0\n* fix bug @alice\n* add test @bob\n"
        assert clients.requests == [
            "POST /graphql",
            "GET https://registry.example.com/widget",
            "GET /repos/acme/widget/commits/master/pulls",
            "POST /graphql",
            "POST /repos/acme/widget/releases",
        ]
        [settings] = clients.settings
        assert settings.verify_tls is True
        assert "http.tls_verification_disabled" not in caplog.text

    def test_clients_closed_after_run(self, clients):
        result = clients.invoke(_REQUIRED)
        assert result.exit_code == 0, result.output
        [github] = clients.github
        [registry] = clients.registry
        assert github._client.is_closed
        assert registry._client.is_closed

    def test_clients_closed_after_failure(self, clients):
        clients.publish_status = 422
        result = clients.invoke(_REQUIRED)
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "Validation Failed" in result.output
        assert clients.github[0]._client.is_closed
        assert clients.registry[0]._client.is_closed

    def test_insecure_disables_verification(self, clients, caplog):
        with (
            caplog.at_level(logging.WARNING),
            patch("httpx.AsyncClient", wraps=httpx.AsyncClient) as async_client,
        ):
            result = clients.invoke(_REQUIRED + ["--insecure"])
        assert result.exit_code == 0, result.output
        assert clients.settings[0].verify_tls is False
        assert async_client.call_count == 2
        assert all(call.kwargs["verify"] is False for call in async_client.call_args_list)
        assert clients.github[0]._client.is_closed
        assert clients.registry[0]._client.is_closed
        assert "http.tls_verification_disabled" in caplog.text

    def test_dry_run_skips_publish(self, clients):
        result = clients.invoke(_REQUIRED + ["--dry-run"])
        assert result.exit_code == 0, result.output
        assert result.output.startswith("acme/widget - main:v2.3.0\n")
        assert "POST /repos/acme/widget/releases" not in clients.requests
        assert clients.github[0]._client.is_closed
