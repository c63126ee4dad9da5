"""Shared test fixtures for okta_auth.

Provides an isolated home directory (so credential and legacy cookie files
never touch the real ``~``), a credential store rooted in ``tmp_path``, a
fake login provider that stands in for the browser, and a session manager
wired from those pieces.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Optional

import pytest

from okta_auth.auth.base import LoginProvider, LoginRequest
from okta_auth.auth.credential_store import CredentialStore
from okta_auth.auth.manager import SessionManager
from okta_auth.models import AuthSettings, Credential
from okta_auth.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during a
    test, the cached references go stale once the test finishes.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Filesystem isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point ``~`` and the XDG directories at ``tmp_path``.

    Legacy cookie paths (``~/.mcp-datahub/cookies.json``) and the default
    store root (``~/.mcp-auth``) both resolve under the returned directory.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ("MCP_AUTH_DIR", "MCP_AUTH_IDP_URL", "MCP_AUTH_LOGIN_TIMEOUT", "MCP_AUTH_HEADLESS"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.delenv("OKTA_USERNAME", raising=False)
    return home


@pytest.fixture
def store(tmp_path: Path) -> CredentialStore:
    """A credential store rooted in a disposable directory."""
    return CredentialStore(tmp_path / "auth")


# ---------------------------------------------------------------------------
# Login provider stand-in
# ---------------------------------------------------------------------------


def make_credential(
    name: str,
    domain: str,
    value: Optional[str] = None,
    expires: Optional[float] = None,
) -> Credential:
    return Credential(name=name, value=value or f"{name}-value", domain=domain, expires=expires)


def hours_from_now(hours: float) -> float:
    return time.time() + hours * 3600


class FakeLoginProvider(LoginProvider):
    """Records every request and returns a canned cookie jar (or raises)."""

    def __init__(
        self,
        cookies: Optional[list[Credential]] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        self.cookies = cookies if cookies is not None else []
        self.error = error
        self.requests: list[LoginRequest] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    def capture(self, request: LoginRequest) -> list[Credential]:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return list(self.cookies)


@pytest.fixture
def make_cookie() -> Any:
    """Factory for credentials: ``make_cookie("idx", ".okta.com", expires=...)``."""
    return make_credential


@pytest.fixture
def fake_provider() -> Any:
    """The :class:`FakeLoginProvider` class, for tests that need their own jar."""
    return FakeLoginProvider


@pytest.fixture
def okta_jar() -> list[Credential]:
    """A browser cookie jar after a successful login to DataHub."""
    return [
        make_credential("idx", ".okta.com", expires=hours_from_now(8)),
        make_credential("DT", "toasttab.okta.com"),
        make_credential("JSESSIONID", "toasttab.com"),
        make_credential("datahub-session", "datahub.eng.toasttab.com", expires=hours_from_now(8)),
        make_credential("_ga", ".google.com"),
    ]


@pytest.fixture
def provider(okta_jar: list[Credential]) -> FakeLoginProvider:
    return FakeLoginProvider(cookies=okta_jar)


@pytest.fixture
def settings() -> AuthSettings:
    return AuthSettings(login_timeout_seconds=30)


@pytest.fixture
def manager(
    store: CredentialStore,
    provider: FakeLoginProvider,
    settings: AuthSettings,
) -> SessionManager:
    return SessionManager(store=store, provider=provider, settings=settings)


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a PLAIN-format, quiet OutputManager as the global output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner() -> Any:
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
