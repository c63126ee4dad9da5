"""Service catalog -- the closed set of downstream services behind Okta.

The catalog is built once at start-up from the built-in descriptors plus any
extra services declared in :class:`~okta_auth.models.AuthSettings`, and is
read-only afterwards. Query methods never raise for unknown keys; write paths
use :meth:`ServiceCatalog.require`, which raises
:class:`~okta_auth.exceptions.UnknownServiceError`.
"""

from __future__ import annotations

from typing import Iterable, Optional

from okta_auth.exceptions import ConfigError, UnknownServiceError
from okta_auth.models import ServiceDescriptor, SessionType

BUILTIN_SERVICES: tuple[ServiceDescriptor, ...] = (
    ServiceDescriptor(
        key="datahub",
        name="DataHub",
        url="https://datahub.eng.toasttab.com",
        cookie_domain="datahub.eng.toasttab.com",
        session_type=SessionType.COOKIE,
        description="Toast's metadata platform",
        legacy_path="~/.mcp-datahub/cookies.json",
    ),
    ServiceDescriptor(
        key="splunk",
        name="Splunk Cloud",
        url="https://toast.splunkcloud.com",
        cookie_domain="toast.splunkcloud.com",
        session_type=SessionType.TOKEN,
        description="Log aggregation and monitoring",
        legacy_path="~/.mcp-splunk/cookies.json",
    ),
    ServiceDescriptor(
        key="zeppelin",
        name="Zeppelin",
        url="https://zeppelin-okta.eng.toasttab.com",
        cookie_domain="zeppelin-okta.eng.toasttab.com",
        session_type=SessionType.COOKIE,
        description="Interactive data analytics notebooks",
        legacy_path="~/.mcp-zeppelin/cookies.json",
    ),
)


class ServiceCatalog:
    """Ordered, read-only registry of :class:`~okta_auth.models.ServiceDescriptor`.

    Args:
        services: Descriptors to register, in display order. Defaults to
            :data:`BUILTIN_SERVICES`.
        extra: Additional descriptors appended after *services* (typically
            from the settings file).

    Raises:
        ConfigError: If two descriptors share a key.

    Example::

        catalog = ServiceCatalog()
        catalog.get("DataHub").url   # lookups are case-insensitive
    """

    def __init__(
        self,
        services: Optional[Iterable[ServiceDescriptor]] = None,
        extra: Optional[Iterable[ServiceDescriptor]] = None,
    ) -> None:
        self._services: dict[str, ServiceDescriptor] = {}
        for descriptor in list(services if services is not None else BUILTIN_SERVICES) + list(extra or ()):
            if descriptor.key in self._services:
                raise ConfigError(f"Duplicate service key in catalog: {descriptor.key}")
            self._services[descriptor.key] = descriptor

    def list(self) -> list[ServiceDescriptor]:
        return list(self._services.values())

    def keys(self) -> list[str]:
        return list(self._services.keys())

    def get(self, key: Optional[str]) -> Optional[ServiceDescriptor]:
        if not key:
            return None
        return self._services.get(key.strip().lower())

    def is_known(self, key: Optional[str]) -> bool:
        return self.get(key) is not None

    def require(self, key: Optional[str]) -> ServiceDescriptor:
        """Return the descriptor for *key* or raise :class:`UnknownServiceError`."""
        descriptor = self.get(key)
        if descriptor is None:
            raise UnknownServiceError(str(key), known=self.keys())
        return descriptor

    def __len__(self) -> int:
        return len(self._services)
