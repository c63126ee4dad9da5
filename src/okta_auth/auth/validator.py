"""Local freshness check for identity provider sessions.

The check is deliberately shallow: it looks for the session marker cookie and
compares its expiry with the clock. No network round-trip is made, so a
session revoked on the server side still looks valid here; callers discover
that only when downstream use fails and they re-authenticate.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from okta_auth.models import Credential, CredentialSet

DEFAULT_SESSION_MARKERS: tuple[str, ...] = ("JSESSIONID", "idx")


class SessionValidator:
    """Decide whether a stored credential set still represents a live session.

    Args:
        marker_names: Cookie names recognised as the identity provider's
            primary session token.
    """

    def __init__(self, marker_names: Iterable[str] = DEFAULT_SESSION_MARKERS) -> None:
        self._marker_names = tuple(marker_names)

    @property
    def marker_names(self) -> tuple[str, ...]:
        return self._marker_names

    def marker(self, credential_set: Optional[CredentialSet]) -> Optional[Credential]:
        """Return the session marker credential, if the set has one."""
        if credential_set is None:
            return None
        return credential_set.find(self._marker_names)

    def expires_at(self, credential_set: Optional[CredentialSet]) -> Optional[datetime]:
        marker = self.marker(credential_set)
        return marker.expires_at if marker is not None else None

    def is_valid(
        self,
        credential_set: Optional[CredentialSet],
        now: Optional[datetime] = None,
    ) -> bool:
        """Return True if the set has a session marker that has not expired.

        A marker without an expiry is assumed valid. A marker whose expiry is
        at or before *now* (default: the current UTC time) is not.
        """
        marker = self.marker(credential_set)
        if marker is None:
            return False
        expires = marker.expires_at
        if expires is None:
            return True
        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now < expires
