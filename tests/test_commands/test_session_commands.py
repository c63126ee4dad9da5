"""Tests for the session commands, invoked through the root Typer app."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from okta_auth.app import app
from okta_auth.auth.credential_store import CredentialStore
from okta_auth.auth.manager import SessionManager
from okta_auth.exceptions import LoginTimeoutError
from okta_auth.exit_codes import EXIT_AUTH_FAILURE, EXIT_NO_SESSION, EXIT_UNKNOWN_SERVICE
from okta_auth.models import CredentialSet


@pytest.fixture(autouse=True)
def _use_manager(manager: SessionManager, monkeypatch: pytest.MonkeyPatch) -> None:
    """Route every command to the fixture manager (fake browser, tmp store)."""
    monkeypatch.setattr("okta_auth.commands.session.create_default_manager", lambda: manager)


def _store_valid_session(store: CredentialStore, make_cookie: Any) -> None:
    store.save(
        CredentialSet(
            scope="okta",
            credentials=[make_cookie("idx", ".okta.com", expires=time.time() + 3600)],
        )
    )


class TestLogin:
    def test_login_runs_browser_when_needed(
        self, cli_runner: CliRunner, provider: Any, store: CredentialStore
    ) -> None:
        result = cli_runner.invoke(app, ["--plain", "login", "datahub"])
        assert result.exit_code == 0, result.output
        assert "Authenticated with datahub" in result.output
        assert provider.calls == 1
        assert store.load("datahub") is not None

    def test_login_username_from_env(self, cli_runner: CliRunner, provider: Any) -> None:
        result = cli_runner.invoke(app, ["login"], env={"OKTA_USERNAME": "jane.doe"})
        assert result.exit_code == 0, result.output
        assert provider.requests[0].username == "jane.doe"

    def test_login_reuses_session(
        self, cli_runner: CliRunner, provider: Any, store: CredentialStore, make_cookie: Any
    ) -> None:
        _store_valid_session(store, make_cookie)
        result = cli_runner.invoke(app, ["login"])
        assert result.exit_code == 0, result.output
        assert "Okta authentication valid" in result.output
        assert provider.calls == 0

    def test_login_force_refresh(
        self, cli_runner: CliRunner, provider: Any, store: CredentialStore, make_cookie: Any
    ) -> None:
        _store_valid_session(store, make_cookie)
        result = cli_runner.invoke(app, ["login", "--force-refresh"])
        assert result.exit_code == 0, result.output
        assert provider.calls == 1

    def test_login_unknown_service(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["login", "jira"])
        assert result.exit_code == EXIT_UNKNOWN_SERVICE
        assert "Unknown service: jira" in result.output

    def test_login_timeout_exits_with_auth_failure(
        self, cli_runner: CliRunner, provider: Any
    ) -> None:
        provider.error = LoginTimeoutError("Timed out after 30s waiting for Okta login to complete")
        result = cli_runner.invoke(app, ["login"])
        assert result.exit_code == EXIT_AUTH_FAILURE
        assert "Timed out after 30s" in result.output


class TestStatus:
    def test_status_json(
        self, cli_runner: CliRunner, store: CredentialStore, make_cookie: Any
    ) -> None:
        _store_valid_session(store, make_cookie)
        result = cli_runner.invoke(app, ["--json", "--quiet", "status"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["okta"]["authenticated"] is True
        assert payload["services"]["datahub"]["hasServiceCookies"] is False

    def test_status_table_and_suggestions(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--plain", "status"])
        assert result.exit_code == 0, result.output
        assert "Scope\tAuthenticated\tService Cookies\tExpires" in result.output
        assert "okta\tno\t-\t-" in result.output
        assert "okta-auth login datahub" in result.output

    def test_status_all_authenticated(
        self, cli_runner: CliRunner, store: CredentialStore, make_cookie: Any
    ) -> None:
        _store_valid_session(store, make_cookie)
        for key in ("datahub", "splunk", "zeppelin"):
            store.save(CredentialSet(scope=key, credentials=[make_cookie("s", f"{key}.example.com")]))
        result = cli_runner.invoke(app, ["--plain", "status"])
        assert result.exit_code == 0, result.output
        assert "All services authenticated." in result.output


class TestToken:
    def test_token_json(
        self, cli_runner: CliRunner, store: CredentialStore, make_cookie: Any
    ) -> None:
        store.save(
            CredentialSet(
                scope="splunk",
                credentials=[make_cookie("splunkd_session", "toast.splunkcloud.com", value="tok")],
            )
        )
        result = cli_runner.invoke(app, ["--json", "--quiet", "token", "splunk"])
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["token"] == "tok"
        assert payload["cookies"][0]["name"] == "splunkd_session"

    def test_token_plain_prints_token(
        self, cli_runner: CliRunner, store: CredentialStore, make_cookie: Any
    ) -> None:
        store.save(
            CredentialSet(
                scope="splunk",
                credentials=[make_cookie("splunkd_session", "toast.splunkcloud.com", value="tok")],
            )
        )
        result = cli_runner.invoke(app, ["--plain", "token", "splunk"])
        assert result.exit_code == 0, result.output
        assert "splunkd_session\ttoast.splunkcloud.com\tsession\ttok" in result.output

    def test_token_missing(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["token", "datahub"])
        assert result.exit_code == EXIT_AUTH_FAILURE
        assert "No authentication found for datahub" in result.output


class TestRefreshCopy:
    def test_refresh_keeps_valid_session(
        self, cli_runner: CliRunner, provider: Any, store: CredentialStore, make_cookie: Any
    ) -> None:
        _store_valid_session(store, make_cookie)
        result = cli_runner.invoke(app, ["refresh"])
        assert result.exit_code == 0, result.output
        assert "Session still valid" in result.output
        assert provider.calls == 0

    def test_copy(
        self,
        cli_runner: CliRunner,
        store: CredentialStore,
        make_cookie: Any,
        isolated_home: Path,
    ) -> None:
        _store_valid_session(store, make_cookie)
        result = cli_runner.invoke(app, ["copy", "datahub", "zeppelin"])
        assert result.exit_code == 0, result.output
        assert (isolated_home / ".mcp-zeppelin" / "cookies.json").is_file()

    def test_copy_without_session(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["copy", "datahub", "zeppelin"])
        assert result.exit_code == EXIT_NO_SESSION
        assert "No Okta session found" in result.output


class TestClear:
    def test_clear_with_confirmation(
        self, cli_runner: CliRunner, store: CredentialStore, make_cookie: Any
    ) -> None:
        _store_valid_session(store, make_cookie)
        result = cli_runner.invoke(app, ["clear"], input="y\n")
        assert result.exit_code == 0, result.output
        assert "All authentication cleared" in result.output
        assert store.load("okta") is None

    def test_clear_declined(
        self, cli_runner: CliRunner, store: CredentialStore, make_cookie: Any
    ) -> None:
        _store_valid_session(store, make_cookie)
        result = cli_runner.invoke(app, ["clear", "all"], input="n\n")
        assert result.exit_code == 0, result.output
        assert "Cancelled." in result.output
        assert store.load("okta") is not None

    def test_clear_service_forced(
        self, cli_runner: CliRunner, store: CredentialStore, make_cookie: Any
    ) -> None:
        _store_valid_session(store, make_cookie)
        store.save(CredentialSet(scope="datahub", credentials=[make_cookie("s", "datahub.example.com")]))
        result = cli_runner.invoke(app, ["--force", "clear", "datahub"])
        assert result.exit_code == 0, result.output
        assert store.load("datahub") is None
        assert store.load("okta") is not None

    def test_clear_unknown_service_does_not_prompt(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["clear", "jira"])
        assert result.exit_code == EXIT_UNKNOWN_SERVICE


class TestServices:
    def test_services_plain(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--plain", "services"])
        assert result.exit_code == 0, result.output
        assert "datahub\tDataHub\tcookie" in result.output
        assert "splunk\tSplunk Cloud\ttoken" in result.output

    def test_services_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--json", "services"])
        assert result.exit_code == 0, result.output
        keys = [s["key"] for s in json.loads(result.stdout)]
        assert keys == ["datahub", "splunk", "zeppelin"]


def test_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.startswith("okta-auth ")
