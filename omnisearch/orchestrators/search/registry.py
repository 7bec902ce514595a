"""Provider registry: the collaborator providers register with.

Packages call add_provider() when they activate and dispose the returned
handle when they deactivate. The orchestrator only listens to add/remove
signals; it never owns providers.
"""

import logging
from collections.abc import Callable
from typing import Any

from omnisearch.contracts.quick_open_v1 import ProviderType
from omnisearch.core.errors import ProviderRegistrationError
from omnisearch.core.events import Disposable, Emitter
from omnisearch.orchestrators.search.interface import Provider

logger = logging.getLogger(__name__)

_DID_ADD = "did-add-provider"
_DID_REMOVE = "did-remove-provider"


class ProviderRegistry:
    """Stores registered providers by name, in registration order."""

    def __init__(self) -> None:
        self._providers: dict[str, Provider] = {}
        self._emitter = Emitter()

    def add_provider(self, provider: Provider) -> Disposable:
        provider_type = getattr(provider, "provider_type", None)
        if not isinstance(provider_type, ProviderType):
            raise ProviderRegistrationError(
                f"Provider {provider!r} has no valid provider_type "
                f"(expected one of {[str(t) for t in ProviderType]})"
            )
        name = provider.name
        if not name:
            raise ProviderRegistrationError(f"Provider {provider!r} has an empty name")
        if name in self._providers:
            raise ProviderRegistrationError(f"Provider '{name}' is already registered")
        self._providers[name] = provider
        logger.info("Registered provider: name=%s type=%s", name, provider_type)
        self._emitter.emit(_DID_ADD, provider)
        return Disposable(lambda: self.remove_provider(provider))

    def remove_provider(self, provider: Provider) -> bool:
        """Unregister provider. Returns False if it was not registered."""
        if self._providers.get(provider.name) is not provider:
            return False
        del self._providers[provider.name]
        logger.info("Removed provider: name=%s", provider.name)
        self._emitter.emit(_DID_REMOVE, provider)
        return True

    def get_provider(self, name: str) -> Provider | None:
        return self._providers.get(name)

    def get_providers(self) -> list[Provider]:
        return list(self._providers.values())

    def on_did_add_provider(self, callback: Callable[[Provider], Any]) -> Disposable:
        return self._emitter.on(_DID_ADD, callback)

    def on_did_remove_provider(self, callback: Callable[[Provider], Any]) -> Disposable:
        return self._emitter.on(_DID_REMOVE, callback)

    def dispose(self) -> None:
        self._emitter.dispose()
        self._providers.clear()
