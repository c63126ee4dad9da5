"""Session manager -- the lifecycle decision tree for Okta sessions.

The :class:`SessionManager` is the central coordinator of the package. For
every operation it reads the current state from the
:class:`~okta_auth.auth.credential_store.CredentialStore`, asks the
:class:`~okta_auth.auth.validator.SessionValidator` whether the identity
provider session is still usable, and only when it is not does it invoke the
interactive :class:`~okta_auth.auth.base.LoginProvider`. Captured cookies are
partitioned into the identity provider scope and, when a service was
targeted, that service's scope.

Error policy:

- Unknown service keys raise :class:`~okta_auth.exceptions.UnknownServiceError`
  and a missing session in :meth:`SessionManager.copy_session` raises
  :class:`~okta_auth.exceptions.NoSessionError`; callers at the tool/CLI
  boundary turn these into error payloads or exit codes.
- Login timeouts, browser faults, and storage write faults are returned as
  failed :class:`~okta_auth.models.AuthResult` instances.

For most use cases, call :func:`create_default_manager`.
"""

from __future__ import annotations

import logging
from typing import Optional

from okta_auth.auth.base import LoginProvider, LoginRequest
from okta_auth.auth.credential_store import CredentialStore
from okta_auth.auth.propagator import SessionPropagator
from okta_auth.auth.validator import SessionValidator
from okta_auth.catalog import ServiceCatalog
from okta_auth.exceptions import NoSessionError, OktaAuthError, StorageError
from okta_auth.models import (
    IDP_SCOPE,
    AuthResult,
    AuthSettings,
    AuthStatus,
    Credential,
    CredentialSet,
    IdpStatus,
    ServiceDescriptor,
    ServiceStatus,
    SessionType,
    domain_matches,
)

logger = logging.getLogger(__name__)

CLEAR_ALL = "all"
_TOKEN_NAME_HINTS = ("token", "session")


class SessionManager:
    """Orchestrates reuse, refresh, and re-authentication of the Okta session.

    The manager is the sole mutator of the credential store. It keeps no
    state of its own between calls, so several processes can share one
    store.

    Args:
        store: Durable per-scope credential storage.
        catalog: Registered downstream services.
        validator: Freshness check for the identity provider set.
        provider: Interactive login backend. Only used when no valid
            session exists or a refresh is forced.
        propagator: Writer for legacy per-service cookie files.
        settings: IdP URL, cookie domains, and login timeout.

    Example::

        manager = create_default_manager()
        result = manager.authenticate("datahub")
        if not result.success:
            print(result.message)
    """

    def __init__(
        self,
        store: CredentialStore,
        catalog: Optional[ServiceCatalog] = None,
        validator: Optional[SessionValidator] = None,
        provider: Optional[LoginProvider] = None,
        propagator: Optional[SessionPropagator] = None,
        settings: Optional[AuthSettings] = None,
    ) -> None:
        self._settings = settings or AuthSettings()
        self._store = store
        self._catalog = catalog or ServiceCatalog(extra=self._settings.services)
        self._validator = validator or SessionValidator(self._settings.session_markers)
        self._provider = provider
        self._propagator = propagator or SessionPropagator(self._catalog)

    @property
    def catalog(self) -> ServiceCatalog:
        return self._catalog

    @property
    def store(self) -> CredentialStore:
        return self._store

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def authenticate(
        self,
        service: Optional[str] = None,
        username: Optional[str] = None,
        force_refresh: bool = False,
    ) -> AuthResult:
        """Return a usable Okta session, logging in interactively only if needed.

        Args:
            service: Optional catalog key. When the existing session is
                valid, the result only signals readiness for the service;
                when a login runs, the service URL is opened and the
                service's cookies are stored in its own scope.
            username: Pre-filled into the username step of the login page.
            force_refresh: Skip the stored session and always log in.

        Raises:
            UnknownServiceError: If *service* is not in the catalog.
        """
        descriptor = self._catalog.require(service) if service else None

        if not force_refresh:
            existing = self._store.load(IDP_SCOPE)
            if existing is not None and self._validator.is_valid(existing):
                logger.info("Using existing Okta session")
                if descriptor is not None:
                    return AuthResult(
                        success=True,
                        message=f"Okta authenticated. Run service-specific auth for {descriptor.key}",
                        service=descriptor.key,
                        cookies=existing.credentials,
                    )
                return AuthResult(
                    success=True,
                    message="Okta authentication valid",
                    cookies=existing.credentials,
                )

        return self._interactive_login(descriptor, username)

    def check_auth_status(self) -> AuthStatus:
        """Build a fresh snapshot of the identity provider and service sessions.

        A service reports ``authenticated`` whenever the Okta session is
        valid; its own cookies are only checked for presence, not expiry.
        """
        okta = self._store.load(IDP_SCOPE)
        authenticated = okta is not None and self._validator.is_valid(okta)
        status = AuthStatus(
            okta=IdpStatus(
                authenticated=authenticated,
                expires_at=self._validator.expires_at(okta) if authenticated else None,
            )
        )
        for descriptor in self._catalog.list():
            service_set = self._store.load(descriptor.key)
            status.services[descriptor.key] = ServiceStatus(
                authenticated=authenticated,
                has_service_cookies=bool(service_set),
            )
        return status

    def get_service_token(self, service: str) -> AuthResult:
        """Return the stored cookies for *service*, plus a best-guess token for token sessions.

        Raises:
            UnknownServiceError: If *service* is not in the catalog.
        """
        descriptor = self._catalog.require(service)
        service_set = self._store.load(descriptor.key)
        if not service_set:
            return AuthResult(
                success=False,
                message=f"No authentication found for {descriptor.key}",
                service=descriptor.key,
            )

        token: Optional[str] = None
        if descriptor.session_type == SessionType.TOKEN:
            token = ""
            for credential in service_set.credentials:
                lowered = credential.name.lower()
                if any(hint in lowered for hint in _TOKEN_NAME_HINTS):
                    token = credential.value
                    break

        return AuthResult(
            success=True,
            message=f"Credentials found for {descriptor.key}",
            service=descriptor.key,
            cookies=service_set.credentials,
            token=token,
        )

    def refresh_session(self) -> AuthResult:
        """Cheap freshness check; logs in again only when the session is gone or expired."""
        okta = self._store.load(IDP_SCOPE)
        if okta is None or not self._validator.is_valid(okta):
            logger.info("Okta session missing or expired; re-authenticating")
            return self.authenticate(force_refresh=True)
        return AuthResult(success=True, message="Session still valid", cookies=okta.credentials)

    def copy_session(self, from_service: str, to_service: str) -> AuthResult:
        """Copy the Okta session into *to_service*'s legacy cookie file.

        Only the identity provider credentials are copied; *from_service*'s
        own cookies are not consulted. The legacy write is best effort.

        Raises:
            UnknownServiceError: If either key is not in the catalog.
            NoSessionError: If no Okta session is stored.
        """
        source = self._catalog.require(from_service)
        target = self._catalog.require(to_service)

        okta = self._store.load(IDP_SCOPE)
        if okta is None:
            raise NoSessionError("No Okta session found")

        written = self._propagator.propagate(target.key, okta)
        logger.info("Copied Okta session from %s to %s", source.key, target.key)
        return AuthResult(
            success=True,
            message=f"Okta session copied to {target.key}",
            service=target.key,
            legacy_path=str(written) if written is not None else None,
        )

    def clear_auth(self, service: Optional[str] = None) -> AuthResult:
        """Clear one service scope, or every scope when *service* is ``None`` or ``"all"``.

        Raises:
            UnknownServiceError: If *service* is neither ``"all"`` nor a catalog key.
        """
        if not service or service.strip().lower() == CLEAR_ALL:
            try:
                self._store.clear_all()
            except StorageError as exc:
                return AuthResult(success=False, message=str(exc))
            logger.info("Cleared all stored authentication")
            return AuthResult(success=True, message="All authentication cleared")

        descriptor = self._catalog.require(service)
        try:
            self._store.clear(descriptor.key)
        except StorageError as exc:
            return AuthResult(success=False, message=str(exc), service=descriptor.key)
        logger.info("Cleared stored authentication for %s", descriptor.key)
        return AuthResult(
            success=True,
            message=f"Authentication cleared for {descriptor.key}",
            service=descriptor.key,
        )

    def list_services(self) -> list[ServiceDescriptor]:
        return self._catalog.list()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _login_provider(self) -> LoginProvider:
        if self._provider is None:
            from okta_auth.plugins.browser_login import PlaywrightLoginProvider

            self._provider = PlaywrightLoginProvider(
                idp_domains=self._settings.idp_domains,
                headless=self._settings.headless,
            )
        return self._provider

    def _interactive_login(
        self,
        descriptor: Optional[ServiceDescriptor],
        username: Optional[str],
    ) -> AuthResult:
        existing = self._store.load(IDP_SCOPE)
        request = LoginRequest(
            target_url=descriptor.url if descriptor is not None else self._settings.idp_url,
            seed=existing.credentials if existing is not None else [],
            username=username,
            timeout_seconds=self._settings.login_timeout_seconds,
        )
        service_key = descriptor.key if descriptor is not None else None

        logger.info("Opening browser for Okta authentication at %s", request.target_url)
        try:
            captured = self._login_provider().capture(request)
        except OktaAuthError as exc:
            logger.error("Browser authentication failed: %s", exc)
            return AuthResult(
                success=False,
                message=f"Browser authentication failed: {exc}",
                service=service_key,
            )
        except Exception as exc:
            logger.exception("Unexpected error during browser authentication")
            return AuthResult(
                success=False,
                message=f"Browser authentication failed: {type(exc).__name__}: {exc}",
                service=service_key,
            )

        okta = _partition(IDP_SCOPE, captured, self._settings.idp_domains)
        try:
            self._store.save(okta)
            if descriptor is not None:
                self._store.save(_partition(descriptor.key, captured, [descriptor.cookie_domain]))
        except StorageError as exc:
            logger.error("Failed to persist captured session: %s", exc)
            return AuthResult(
                success=False,
                message=f"Failed to persist credentials: {exc}",
                service=service_key,
            )

        return AuthResult(
            success=True,
            message=(
                f"Authenticated with {descriptor.key}"
                if descriptor is not None
                else "Okta authentication successful"
            ),
            service=service_key,
            cookies=okta.credentials,
        )


def create_default_manager(settings: Optional[AuthSettings] = None) -> SessionManager:
    """Create a :class:`SessionManager` wired from *settings*.

    Loads settings via :func:`~okta_auth.config.load_settings` when none
    are given. The Playwright login provider is created lazily on the first
    interactive login, so read-only operations never import a browser.
    """
    from okta_auth.config import get_auth_dir, load_settings

    if settings is None:
        settings = load_settings()
    return SessionManager(store=CredentialStore(get_auth_dir(settings)), settings=settings)


def _partition(scope: str, credentials: list[Credential], domains: list[str]) -> CredentialSet:
    """Select the credentials whose cookie domain matches any of *domains*, keeping order."""
    return CredentialSet(
        scope=scope,
        credentials=[c for c in credentials if any(domain_matches(c.domain, d) for d in domains)],
    )
