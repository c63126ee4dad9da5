"""Abstract interface for the interactive login capability.

This module defines the two types the session manager uses to drive a
human-in-the-loop login without knowing how the browser is automated:

- :class:`LoginRequest` -- what to open, which cookies to seed, and how long
  to wait for the user.
- :class:`LoginProvider` -- the abstract base class every login backend
  extends.

The bundled backend is
:class:`~okta_auth.plugins.browser_login.PlaywrightLoginProvider`. Tests
substitute a fake provider so that no browser is launched.

See Also:
    :class:`~okta_auth.auth.manager.SessionManager` for the caller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from okta_auth.models import Credential


@dataclass(frozen=True)
class LoginRequest:
    """Parameters for one interactive login.

    Attributes:
        target_url: Page to open; either a service entry URL or the
            identity provider's generic entry URL.
        seed: Existing identity provider cookies loaded into the browser
            first, so a partially valid session is reused.
        username: If set, only the username step is filled in; password
            and second factor are always left to the human.
        timeout_seconds: Upper bound on the wait for the user to leave the
            login page.
    """

    target_url: str
    seed: list[Credential] = field(default_factory=list)
    username: Optional[str] = None
    timeout_seconds: float = 120.0


class LoginProvider(ABC):
    """Abstract base class for interactive login backends."""

    @abstractmethod
    def capture(self, request: LoginRequest) -> list[Credential]:
        """Run the interactive login and return every cookie in the browsing context.

        Implementations must release any browser resources on every exit
        path, including timeouts and errors.

        Args:
            request: What to open and how long to wait.

        Returns:
            All cookies from the browsing context, in the order reported.

        Raises:
            LoginTimeoutError: If the user did not complete the login page
                within ``request.timeout_seconds``.
            CaptureError: If the browser failed.
        """
        ...
