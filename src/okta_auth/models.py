"""Canonical Pydantic models shared across all okta_auth modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Credential models** -- persisted on disk by the credential store:
    :class:`Credential` and :class:`CredentialSet`.

**Catalog and configuration models** -- :class:`SessionType`,
    :class:`ServiceDescriptor`, and :class:`AuthSettings`.

**Result models** -- returned by :class:`~okta_auth.auth.manager.SessionManager`
and serialised as MCP tool payloads: :class:`AuthResult`,
:class:`IdpStatus`, :class:`ServiceStatus`, and :class:`AuthStatus`.

Credentials use the cookie shape produced by Playwright
(``httpOnly``, ``sameSite``, ``expires`` in epoch seconds) so that stored
records can be fed straight back into a browser context and stay readable
by tools that predate the centralized store. Result models serialise with
camelCase aliases; call ``to_payload()`` for the JSON-ready form.
"""

from __future__ import annotations

import enum
import re
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

IDP_SCOPE = "okta"
"""Reserved credential store scope for the identity provider session."""

SCOPE_KEY_RE = re.compile(r"^[a-z0-9][a-z0-9_-]*$")
"""Scope and service keys double as file names in the credential store."""


def domain_matches(domain: str, pattern: str) -> bool:
    """Return True when cookie *domain* equals *pattern* or is a subdomain of it.

    Leading dots (``.okta.com``) are ignored on both sides and the
    comparison is case-insensitive.
    """
    domain = domain.lstrip(".").lower()
    pattern = pattern.lstrip(".").lower()
    if not domain or not pattern:
        return False
    return domain == pattern or domain.endswith("." + pattern)


# --- Credentials ---


class Credential(BaseModel):
    """A single cookie captured from the browser.

    Immutable once captured; a later capture supersedes it rather than
    mutating it.

    Example::

        Credential(name="idx", value="abc", domain=".okta.com", expires=1893456000)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    value: str
    domain: str
    path: str = "/"
    expires: Optional[float] = Field(
        default=None, description="Absolute expiry in epoch seconds (None = session cookie)"
    )
    http_only: Optional[bool] = Field(default=None, alias="httpOnly")
    secure: Optional[bool] = None
    same_site: Optional[str] = Field(default=None, alias="sameSite")
    host_only: Optional[bool] = Field(default=None, alias="hostOnly")

    @field_validator("expires", mode="before")
    @classmethod
    def _normalise_expiry(cls, value: Any) -> Optional[float]:
        # Playwright reports session cookies with expires=-1.
        if value is None:
            return None
        value = float(value)
        if value <= 0:
            return None
        try:
            datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise ValueError(f"expires out of range: {value}") from exc
        return value

    @property
    def expires_at(self) -> Optional[datetime]:
        """The expiry as an aware UTC datetime, or ``None`` for session cookies."""
        if self.expires is None:
            return None
        return datetime.fromtimestamp(self.expires, tz=timezone.utc)

    def to_cookie(self) -> dict[str, Any]:
        """Return the Playwright-compatible cookie dict for this credential."""
        return self.model_dump(by_alias=True, exclude_none=True)


class CredentialSet(BaseModel):
    """Ordered collection of credentials captured together for one scope.

    Attributes:
        scope: Either :data:`IDP_SCOPE` or a service key.
        credentials: Credentials in capture order.
    """

    scope: str
    credentials: list[Credential] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.credentials)

    def find(self, names: Iterable[str]) -> Optional[Credential]:
        """Return the first credential whose name is in *names*."""
        wanted = set(names)
        for credential in self.credentials:
            if credential.name in wanted:
                return credential
        return None

    def to_cookies(self) -> list[dict[str, Any]]:
        """Return the credentials as a list of Playwright cookie dicts."""
        return [c.to_cookie() for c in self.credentials]


# --- Catalog ---


class SessionType(str, enum.Enum):
    """How a downstream service represents its session."""

    COOKIE = "cookie"
    TOKEN = "token"


class ServiceDescriptor(BaseModel):
    """A downstream service that sits behind the identity provider.

    Keys are normalised to lower case. ``legacy_path`` points at the cookie
    file the service's standalone tool used before sessions were
    centralized; ``~`` is expanded when the path is used.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key: str = Field(description="Unique lower-case identifier, e.g. 'datahub'")
    name: str = Field(description="Display name")
    url: str = Field(description="Entry URL opened for service-specific login")
    cookie_domain: str = Field(alias="cookieDomain")
    session_type: SessionType = Field(default=SessionType.COOKIE, alias="sessionType")
    description: str = ""
    legacy_path: Optional[str] = Field(default=None, alias="legacyPath")

    @field_validator("key")
    @classmethod
    def _normalise_key(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("service key must not be empty")
        if value == IDP_SCOPE or value == "all":
            raise ValueError(f"service key '{value}' is reserved")
        if not SCOPE_KEY_RE.match(value):
            raise ValueError(
                f"service key '{value}' must start with a letter or digit and contain only "
                "letters, digits, '-' or '_'"
            )
        return value

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# --- Settings ---


class AuthSettings(BaseModel):
    """User-wide settings persisted at ``~/.config/okta-auth/config.json``.

    Loaded by :func:`~okta_auth.config.load_settings`, which layers
    ``MCP_AUTH_*`` environment variables on top of the file.
    """

    auth_dir: Optional[str] = Field(
        default=None, description="Credential store root (default ~/.mcp-auth)"
    )
    idp_url: str = Field(
        default="https://toasttab.okta.com",
        description="Identity provider entry URL used when no service is targeted",
    )
    idp_domains: list[str] = Field(
        default_factory=lambda: ["okta.com", "toasttab.com"],
        description="Cookie domains that belong to the identity provider session",
    )
    session_markers: list[str] = Field(
        default_factory=lambda: ["JSESSIONID", "idx"],
        description="Cookie names that mark a live identity provider session",
    )
    login_timeout_seconds: int = Field(
        default=120, description="How long to wait for the user to finish logging in"
    )
    headless: bool = Field(default=False, description="Run the login browser headless")
    services: list[ServiceDescriptor] = Field(
        default_factory=list, description="Extra services merged into the catalog"
    )


# --- Results ---


class AuthResult(BaseModel):
    """Outcome of a session operation."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    service: Optional[str] = None
    cookies: list[Credential] = Field(default_factory=list)
    token: Optional[str] = None
    legacy_path: Optional[str] = Field(default=None, alias="legacyPath")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class IdpStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    authenticated: bool = False
    expires_at: Optional[datetime] = Field(default=None, alias="expiresAt")


class ServiceStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    authenticated: bool = False
    has_service_cookies: bool = Field(default=False, alias="hasServiceCookies")


class AuthStatus(BaseModel):
    """Snapshot of identity provider and per-service session state.

    Computed fresh on every query and never persisted.
    """

    okta: IdpStatus = Field(default_factory=IdpStatus)
    services: dict[str, ServiceStatus] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
