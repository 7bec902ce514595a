"""Provider catalog: tracks active providers and derives their render specs.

The catalog mirrors the registry's add/remove signals. GLOBAL providers are
always relevant; DIRECTORY providers only while at least one tracked
directory is eligible for them. Every change yields exactly one
providers-changed notification on the shared bus.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from omnisearch.contracts.quick_open_v1 import (
    DEFAULT_QUERY_DEBOUNCE_DELAY_MS,
    OMNISEARCH_PROVIDER_SPEC,
    ChangeEvent,
    ProviderDisplay,
    ProviderSpec,
    ProviderType,
)
from omnisearch.core.events import CompositeDisposable, Emitter
from omnisearch.core.logger import logger
from omnisearch.orchestrators.search.directories import DirectoryRanker
from omnisearch.orchestrators.search.interface import DirectoryLike, Provider
from omnisearch.orchestrators.search.registry import ProviderRegistry


def _spec_for(
    provider: Provider, display: ProviderDisplay, default_debounce_delay: int
) -> ProviderSpec:
    return ProviderSpec(
        action=display.action,
        can_open_all=display.can_open_all,
        debounce_delay=(
            display.debounce_delay
            if display.debounce_delay is not None
            else default_debounce_delay
        ),
        name=provider.name,
        prompt=display.prompt,
        title=display.title,
        priority=provider.priority,
    )


class ProviderCatalog:
    """Active providers, their directory eligibility and renderable specs."""

    def __init__(
        self,
        registry: ProviderRegistry,
        bus: Emitter,
        ranker: DirectoryRanker,
        default_debounce_delay: int = DEFAULT_QUERY_DEBOUNCE_DELAY_MS,
    ) -> None:
        self._bus = bus
        self._ranker = ranker
        self._default_debounce_delay = default_debounce_delay
        # Insertion order is registration order.
        self._providers: dict[str, Provider] = {
            p.name: p for p in registry.get_providers()
        }
        # provider name -> eligible directory paths, host order
        self._eligible: dict[str, tuple[str, ...]] = {}
        # DIRECTORY providers whose eligibility has never been checked
        self._unchecked: set[str] = {
            p.name for p in self._providers.values() if p.provider_type == ProviderType.DIRECTORY
        }
        self._pending: set[asyncio.Task] = set()
        self._specs: tuple[ProviderSpec, ...] = self._compute_specs()
        self._subscriptions = CompositeDisposable(
            registry.on_did_add_provider(self._on_provider_added),
            registry.on_did_remove_provider(self._on_provider_removed),
        )
        self.disposed = False
        if self._unchecked:
            self._spawn(self.check_pending)

    # -- reads ------------------------------------------------------------

    def get_renderable_providers(self) -> list[ProviderSpec]:
        return list(self._specs)

    def get_spec(self, name: str) -> ProviderSpec | None:
        for spec in self._specs:
            if spec.name == name:
                return spec
        return None

    def get_provider(self, name: str) -> Provider | None:
        return self._providers.get(name)

    def is_relevant(self, provider: Provider) -> bool:
        if provider.provider_type == ProviderType.GLOBAL:
            return True
        return bool(self._eligible.get(provider.name))

    def is_eligible(self, provider_name: str, path: str) -> bool:
        return path in self._eligible.get(provider_name, ())

    def get_relevant_providers(self) -> list[Provider]:
        return [p for p in self._providers.values() if self.is_relevant(p)]

    @property
    def has_unchecked(self) -> bool:
        return bool(self._unchecked)

    # -- registry signals -------------------------------------------------

    def _on_provider_added(self, provider: Provider) -> None:
        if self.disposed:
            return
        self._providers[provider.name] = provider
        logger.provider_registered(provider.name, str(provider.provider_type))
        if provider.provider_type == ProviderType.DIRECTORY:
            self._unchecked.add(provider.name)
            # Notify once eligibility is known. Without a running loop, notify
            # now and leave the check to check_pending or refresh_relevance.
            if self._spawn(self._check_new_directory_provider, provider):
                return
        self._changed()

    def _on_provider_removed(self, provider: Provider) -> None:
        if self.disposed or self._providers.get(provider.name) is not provider:
            return
        del self._providers[provider.name]
        self._eligible.pop(provider.name, None)
        self._unchecked.discard(provider.name)
        logger.provider_removed(provider.name)
        self._changed()

    def _spawn(self, func: Callable[..., Awaitable[Any]], *args: Any) -> bool:
        """Run func(*args) as a tracked task; False if no event loop is running."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return False
        task = loop.create_task(func(*args))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return True

    async def _check_new_directory_provider(self, provider: Provider) -> None:
        paths = await self._current_eligible_paths(provider)
        if self.disposed:
            return
        # A refresh that finished first already holds newer eligibility.
        if self._providers.get(provider.name) is provider and provider.name in self._unchecked:
            self._unchecked.discard(provider.name)
            self._eligible[provider.name] = paths
        self._changed()

    # -- relevance --------------------------------------------------------

    async def check_pending(self) -> bool:
        """Check DIRECTORY providers whose eligibility is still unknown.

        Covers providers seeded from the registry and providers added while
        no event loop was running. Emits one providers-changed if any of them
        became relevant.
        """
        providers = [p for p in self._providers.values() if p.name in self._unchecked]
        if not providers:
            return False
        eligible = await asyncio.gather(*(self._current_eligible_paths(p) for p in providers))
        if self.disposed:
            return False
        changed = False
        for provider, paths in zip(providers, eligible):
            if self._providers.get(provider.name) is not provider:
                continue
            if provider.name not in self._unchecked:
                continue
            self._unchecked.discard(provider.name)
            self._eligible[provider.name] = paths
            changed = changed or bool(paths)
        if changed:
            self._changed()
        return changed

    async def refresh_relevance(self, directories_changed: bool = False) -> bool:
        """Re-check every DIRECTORY provider against the tracked directories.

        Emits one providers-changed if relevance or the directories changed.
        """
        providers = [
            p for p in self._providers.values() if p.provider_type == ProviderType.DIRECTORY
        ]
        eligible = await asyncio.gather(*(self._current_eligible_paths(p) for p in providers))
        if self.disposed:
            return False
        changed = directories_changed
        for provider, paths in zip(providers, eligible):
            if self._providers.get(provider.name) is not provider:
                continue
            self._unchecked.discard(provider.name)
            if self._eligible.get(provider.name, ()) != paths:
                self._eligible[provider.name] = paths
                changed = True
        if changed:
            self._changed()
        return changed

    async def _current_eligible_paths(self, provider: Provider) -> tuple[str, ...]:
        # Re-check while the tracked directories change under the check.
        while True:
            directories = self._ranker.directories
            paths = await self._eligible_paths(provider, directories)
            if self.disposed or [d.path for d in directories] == self._ranker.paths:
                return paths

    async def _eligible_paths(
        self, provider: Provider, directories: Sequence[DirectoryLike]
    ) -> tuple[str, ...]:
        checks = await asyncio.gather(*(self._is_eligible(provider, d) for d in directories))
        return tuple(d.path for d, ok in zip(directories, checks) if ok)

    async def _is_eligible(self, provider: Provider, directory: DirectoryLike) -> bool:
        try:
            return bool(await provider.is_eligible_for_directory(directory))
        except Exception as e:
            logger.warning(
                "Eligibility check failed for %s in %s: %s", provider.name, directory.path, e
            )
            return False

    # -- specs ------------------------------------------------------------

    def _compute_specs(self) -> tuple[ProviderSpec, ...]:
        # Omnisearch ranks ahead of every registered provider of equal priority.
        ranked: list[tuple[float, int, ProviderSpec]] = [
            (OMNISEARCH_PROVIDER_SPEC.priority, -1, OMNISEARCH_PROVIDER_SPEC)
        ]
        for index, provider in enumerate(self._providers.values()):
            display = provider.display
            if display is None or not self.is_relevant(provider):
                continue
            spec = _spec_for(provider, display, self._default_debounce_delay)
            ranked.append((provider.priority, index, spec))
        ranked.sort(key=lambda entry: (entry[0], entry[1]))
        return tuple(spec for _, _, spec in ranked)

    def _changed(self) -> None:
        self._specs = self._compute_specs()
        self._bus.emit(ChangeEvent.PROVIDERS_CHANGED)

    def dispose(self) -> None:
        self.disposed = True
        self._subscriptions.dispose()
        for task in list(self._pending):
            task.cancel()
        self._pending.clear()
        self._providers.clear()
        self._eligible.clear()
        self._unchecked.clear()
