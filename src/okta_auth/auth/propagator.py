"""Best-effort propagation of the Okta session into legacy cookie files.

Before sessions were centralized, each service's MCP tool kept its own cookie
file (``~/.mcp-datahub/cookies.json`` and so on). :class:`SessionPropagator`
writes the identity provider's credential set into those files so the older
tools keep working. A failed write is logged and swallowed; it never changes
the outcome of the operation that requested it.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from okta_auth.catalog import ServiceCatalog
from okta_auth.config import atomic_write
from okta_auth.models import CredentialSet

logger = logging.getLogger(__name__)

_FILE_MODE = 0o600


class SessionPropagator:
    """Copy credential sets into per-service legacy locations.

    Args:
        catalog: Source of each service's ``legacy_path``.
    """

    def __init__(self, catalog: ServiceCatalog) -> None:
        self._catalog = catalog

    def legacy_path(self, service: str) -> Optional[Path]:
        """Return the expanded legacy location for *service*, or ``None``."""
        descriptor = self._catalog.get(service)
        if descriptor is None or not descriptor.legacy_path:
            return None
        return Path(descriptor.legacy_path).expanduser()

    def propagate(self, service: str, credential_set: CredentialSet) -> Optional[Path]:
        """Write *credential_set* to *service*'s legacy location.

        Returns:
            The path written, or ``None`` if the service has no legacy
            location or the write failed.
        """
        path = self.legacy_path(service)
        if path is None:
            logger.debug("No legacy location for %s; nothing to propagate", service)
            return None
        text = json.dumps(credential_set.to_cookies(), indent=2) + "\n"
        try:
            atomic_write(path, text, mode=_FILE_MODE)
        except OSError as exc:
            logger.warning("Failed to copy session to legacy path %s: %s", path, exc)
            return None
        logger.info("Copied %s session to %s (legacy path)", credential_set.scope, path)
        return path
