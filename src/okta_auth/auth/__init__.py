"""Session lifecycle core for okta_auth.

The main entry points are:

- :class:`SessionManager` -- decides whether to reuse, refresh, or
  re-capture the Okta session, and is the only writer to the store.
- :func:`create_default_manager` -- factory wired from the user's settings.
- :class:`CredentialStore` -- per-scope durable storage on disk.
- :class:`SessionValidator` -- local freshness check for the Okta session.
- :class:`SessionPropagator` -- best-effort copy into legacy cookie files.
- :class:`LoginProvider` -- abstract base class for interactive login backends.

Typical usage::

    from okta_auth.auth import create_default_manager

    manager = create_default_manager()
    status = manager.check_auth_status()
"""

from okta_auth.auth.base import LoginProvider, LoginRequest
from okta_auth.auth.credential_store import CredentialStore
from okta_auth.auth.manager import SessionManager, create_default_manager
from okta_auth.auth.propagator import SessionPropagator
from okta_auth.auth.validator import SessionValidator

__all__ = [
    "CredentialStore",
    "LoginProvider",
    "LoginRequest",
    "SessionManager",
    "SessionPropagator",
    "SessionValidator",
    "create_default_manager",
]
