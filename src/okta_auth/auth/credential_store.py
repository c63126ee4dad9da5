"""Persistent credential store scoped per identity provider and per service.

Layout under the store root (``~/.mcp-auth`` by default)::

    okta-cookies.json        # identity provider scope
    services/<service>.json  # one file per service scope

Each file holds a JSON array of Playwright-shaped cookies. Files are written
atomically via :func:`~okta_auth.config.atomic_write` with ``0o600``
permissions applied before any content lands, so a concurrent reader never
sees a partial set and secrets are never world-readable.

Nothing is cached in memory: every :meth:`CredentialStore.load` re-reads the
file, which keeps independent processes (the MCP server, CLI invocations,
older per-service tools) consistent without coordination. Concurrent saves to
the same scope are last-writer-wins.

See Also:
    :class:`~okta_auth.auth.manager.SessionManager` -- the only mutator.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from okta_auth.config import atomic_write
from okta_auth.exceptions import StorageError
from okta_auth.models import IDP_SCOPE, SCOPE_KEY_RE, Credential, CredentialSet

logger = logging.getLogger(__name__)

_IDP_FILENAME = "okta-cookies.json"
_SERVICES_DIRNAME = "services"
_FILE_MODE = 0o600
_DIR_MODE = 0o700

_credential_list = TypeAdapter(list[Credential])


class CredentialStore:
    """Read/write credential sets keyed by scope.

    Args:
        root: Store root directory. Created (with the ``services``
            sub-directory) on construction.

    Example::

        store = CredentialStore(Path("~/.mcp-auth").expanduser())
        store.save(CredentialSet(scope="okta", credentials=[...]))
        current = store.load("okta")
    """

    def __init__(self, root: Path) -> None:
        self._root = Path(root)
        self.ensure_layout()

    @property
    def root(self) -> Path:
        return self._root

    @property
    def services_dir(self) -> Path:
        return self._root / _SERVICES_DIRNAME

    def path_for(self, scope: str) -> Path:
        """Return the file backing *scope*.

        Raises:
            StorageError: If *scope* is not a valid scope name.
        """
        if not SCOPE_KEY_RE.match(scope or ""):
            raise StorageError(f"Invalid credential scope: {scope!r}")
        if scope == IDP_SCOPE:
            return self._root / _IDP_FILENAME
        return self.services_dir / f"{scope}.json"

    def ensure_layout(self) -> None:
        """Create the root and services directories with owner-only access."""
        try:
            for directory in (self._root, self.services_dir):
                directory.mkdir(parents=True, exist_ok=True)
                os.chmod(directory, _DIR_MODE)
        except OSError as exc:
            raise StorageError(f"Cannot prepare credential store at {self._root}: {exc}") from exc

    def load(self, scope: str) -> Optional[CredentialSet]:
        """Load the credential set stored for *scope*.

        Returns:
            The stored :class:`~okta_auth.models.CredentialSet`, or ``None``
            if the record is missing, unreadable, or corrupt.
        """
        try:
            path = self.path_for(scope)
        except StorageError:
            logger.debug("Ignoring load for invalid scope %r", scope)
            return None
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            credentials = _credential_list.validate_python(data)
        except (OSError, json.JSONDecodeError, ValidationError, ValueError) as exc:
            logger.debug("Treating unreadable credential record %s as absent: %s", path, exc)
            return None
        return CredentialSet(scope=scope, credentials=credentials)

    def save(self, credential_set: CredentialSet) -> Path:
        """Persist *credential_set* under its scope atomically with ``0o600`` permissions.

        Returns:
            The path written.

        Raises:
            StorageError: If the file cannot be written.
        """
        path = self.path_for(credential_set.scope)
        text = json.dumps(credential_set.to_cookies(), indent=2) + "\n"
        try:
            atomic_write(path, text, mode=_FILE_MODE)
        except OSError as exc:
            raise StorageError(f"Cannot write credentials to {path}: {exc}") from exc
        logger.debug("Saved %d credentials for scope %s", len(credential_set), credential_set.scope)
        return path

    def clear(self, scope: str) -> None:
        """Delete the record for *scope*. A no-op when it does not exist.

        Raises:
            StorageError: If the file exists but cannot be removed.
        """
        path = self.path_for(scope)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot remove {path}: {exc}") from exc

    def clear_all(self) -> None:
        """Remove every scope's record and recreate an empty store layout.

        Only files the store owns are deleted; anything else under the root
        is left alone.

        Raises:
            StorageError: If a record cannot be removed or the layout recreated.
        """
        records = [self._root / _IDP_FILENAME]
        if self.services_dir.is_dir():
            records.extend(self.services_dir.glob("*.json"))
        for path in records:
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                raise StorageError(f"Cannot remove {path}: {exc}") from exc
        self.ensure_layout()
