"""
Provider registry for managing data providers.

Providers are kept in registration order and are unique by name: the first
registration wins and later registrations under the same name are no-ops.
"""

from __future__ import annotations

from collections.abc import Iterator
from threading import Lock

from omd.core.data.providers.base import DataProvider
from omd.core.exceptions import ConfigurationError
from omd.core.logging import logger
from omd.core.models import DataCategory


class ProviderRegistry:
    """Ordered, de-duplicated set of data providers."""

    def __init__(self) -> None:
        self._providers: list[DataProvider] = []
        self._lock = Lock()

    def register_provider(self, provider: DataProvider) -> bool:
        """
        Register a data provider.

        Args:
            provider: The data provider to register

        Returns:
            bool: True if added, False if a provider with that name already exists

        Raises:
            ConfigurationError: When the provider is not a DataProvider or has no name
        """
        if not isinstance(provider, DataProvider):
            raise ConfigurationError(
                "Provider must implement DataProvider interface",
                config_key="provider_type",
                details={"provider_class": type(provider).__name__},
            )
        if not getattr(provider, "name", None):
            raise ConfigurationError("Provider name cannot be empty", config_key="provider_name")

        with self._lock:
            if any(existing.name == provider.name for existing in self._providers):
                logger.debug("Ignoring duplicate provider registration: {}", provider.name)
                return False
            self._providers.append(provider)

        logger.debug("Registered provider: {}", provider.name)
        return True

    def get_providers(self) -> list[DataProvider]:
        """Snapshot of all providers in registration order."""
        with self._lock:
            return list(self._providers)

    def get_provider(self, name: str) -> DataProvider | None:
        with self._lock:
            return next((p for p in self._providers if p.name == name), None)

    def providers_with_capability(self, category: DataCategory | str) -> list[DataProvider]:
        """Providers declaring ``category``, enabled or not, in registration order."""
        return [p for p in self.get_providers() if p.supports(category)]

    def clear(self) -> None:
        with self._lock:
            self._providers.clear()

    def __len__(self) -> int:
        return len(self.get_providers())

    def __contains__(self, name: object) -> bool:
        return any(p.name == name for p in self.get_providers())

    def __iter__(self) -> Iterator[DataProvider]:
        return iter(self.get_providers())
