"""Search result orchestrator: catalog, debounced dispatch, cache, notifications.

Pipeline for one query:
  1. Normalize (strip surrounding whitespace) and debounce
  2. Stamp the dispatch with a new generation
  3. Check directory providers whose eligibility is still unknown, then
     mark every relevant (provider, scope) as loading
  4. Call GLOBAL providers once and DIRECTORY providers once per eligible
     directory, in ranked directory order, all concurrently
  5. As each call settles, write it to the cache if its generation is still
     current, then batch a results-changed notification

Superseded calls are never aborted. Their results are dropped on arrival,
so a provider must tolerate doing work nobody will read.
"""

import asyncio
import time
from collections.abc import Callable
from typing import Any

from omnisearch.contracts.quick_open_v1 import (
    GLOBAL_KEY,
    OMNISEARCH_PROVIDER_NAME,
    ChangeEvent,
    ProviderSpec,
    ProviderType,
    QueryResult,
)
from omnisearch.core.config import config
from omnisearch.core.errors import ProviderExecutionError
from omnisearch.core.events import CompositeDisposable, Disposable, Emitter
from omnisearch.core.logger import logger
from omnisearch.orchestrators.search.cache import ResultCache, wrap_result
from omnisearch.orchestrators.search.catalog import ProviderCatalog
from omnisearch.orchestrators.search.debounce import Debouncer
from omnisearch.orchestrators.search.directories import DirectoryRanker
from omnisearch.orchestrators.search.interface import (
    DirectoryLike,
    DirectorySource,
    Provider,
)
from omnisearch.orchestrators.search.project import ProjectDirectories
from omnisearch.orchestrators.search.registry import ProviderRegistry


def normalize_query(query: str) -> str:
    return query.strip()


class SearchResultOrchestrator:
    """Aggregates every active provider into one quick-open experience."""

    def __init__(
        self,
        registry: ProviderRegistry,
        directory_source: DirectorySource | None = None,
        *,
        query_debounce_ms: int | None = None,
        directory_debounce_ms: int | None = None,
        loading_event_delay_ms: int | None = None,
        max_omni_results_per_provider: int | None = None,
        max_cached_queries: int | None = None,
    ):
        self._query_debounce_ms = (
            config.query_debounce_ms if query_debounce_ms is None else query_debounce_ms
        )
        directory_debounce_ms = (
            config.directory_debounce_ms
            if directory_debounce_ms is None
            else directory_debounce_ms
        )
        self._loading_event_delay_ms = (
            config.loading_event_delay_ms
            if loading_event_delay_ms is None
            else loading_event_delay_ms
        )
        self._max_omni_results = (
            config.max_omni_results_per_provider
            if max_omni_results_per_provider is None
            else max_omni_results_per_provider
        )
        self.disposed = False
        self._directory_source = (
            directory_source if directory_source is not None else ProjectDirectories()
        )
        self._bus = Emitter()
        self._cache = ResultCache(
            config.max_cached_queries if max_cached_queries is None else max_cached_queries
        )
        self._ranker = DirectoryRanker()
        self._ranker.set_directories(self._directory_source.get_directories())
        # Subscribed before the catalog so a removed provider's results are
        # purged before providers-changed reaches listeners.
        self._subscriptions = CompositeDisposable(
            registry.on_did_remove_provider(self._on_provider_removed),
            self._directory_source.on_did_change_directories(self._on_directories_changed),
        )
        self._catalog = ProviderCatalog(
            registry,
            self._bus,
            self._ranker,
            default_debounce_delay=self._query_debounce_ms,
        )

        self._generation = 0
        self._current_query: str | None = None
        self._directories_stale = False
        self._loading_handle: asyncio.TimerHandle | None = None
        self._flush_handle: asyncio.Handle | None = None
        self._debounced_query = Debouncer(
            self._execute_query, self._query_debounce_ms / 1000
        )
        self._debounced_update_directories = Debouncer(
            self.update_directories, directory_debounce_ms / 1000
        )

    @property
    def generation(self) -> int:
        return self._generation

    # -- subscriptions ----------------------------------------------------

    def on_providers_changed(self, callback: Callable[[], Any]) -> Disposable:
        return self._bus.on(ChangeEvent.PROVIDERS_CHANGED, callback)

    def on_results_changed(self, callback: Callable[[], Any]) -> Disposable:
        return self._bus.on(ChangeEvent.RESULTS_CHANGED, callback)

    def _on_provider_removed(self, provider: Provider) -> None:
        if self.disposed:
            return
        self._cache.remove_provider(provider.name)

    def _on_directories_changed(self) -> None:
        if self.disposed:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No loop to debounce on; the next dispatch refreshes first.
            self._directories_stale = True
            return
        self._debounced_update_directories()

    # -- providers and directories ----------------------------------------

    def get_renderable_providers(self) -> list[ProviderSpec]:
        return self._catalog.get_renderable_providers()

    def set_current_working_root(self, directory: DirectoryLike | None) -> None:
        self._ranker.set_current_working_root(directory)

    def sort_directories(self) -> list[DirectoryLike]:
        return self._ranker.sort_directories()

    async def update_directories(self) -> bool:
        """Re-read the host's directories and re-check provider eligibility.

        Returns True (and emits one providers-changed) only if something
        changed; calling it again with the same directories is a no-op.
        """
        if self.disposed:
            return False
        directories_changed = self._ranker.set_directories(
            self._directory_source.get_directories()
        )
        changed = await self._catalog.refresh_relevance(directories_changed)
        logger.directories_updated(self._ranker.paths, changed)
        return changed

    # -- queries ----------------------------------------------------------

    def execute_query(self, query: str, provider_name: str | None = None) -> asyncio.Future:
        """Debounced dispatch of query to every relevant provider.

        The debounce window is provider_name's declared delay, or the
        default. The returned future resolves once the dispatch this call
        collapsed into has settled; awaiting it is optional.
        """
        delay_ms = self._query_debounce_ms
        if provider_name is not None:
            spec = self._catalog.get_spec(provider_name)
            if spec is not None:
                delay_ms = spec.debounce_delay
        return self._debounced_query(normalize_query(query), delay=delay_ms / 1000)

    async def _execute_query(self, query: str) -> None:
        if self.disposed:
            return
        query = normalize_query(query)
        self._generation += 1
        generation = self._generation
        if self._current_query is not None and self._current_query != query:
            self._cache.drop_loading(self._current_query)
        self._current_query = query
        if self._directories_stale or self._catalog.has_unchecked:
            if self._directories_stale:
                self._directories_stale = False
                await self.update_directories()
            else:
                await self._catalog.check_pending()
            if self.disposed or generation != self._generation:
                return

        calls: list[tuple[Provider, str, DirectoryLike | None]] = []
        for provider in self._catalog.get_relevant_providers():
            if provider.provider_type == ProviderType.GLOBAL:
                scoped: list[tuple[str, DirectoryLike | None]] = [(GLOBAL_KEY, None)]
            else:
                scoped = [
                    (directory.path, directory)
                    for directory in self._ranker.sort_directories()
                    if self._catalog.is_eligible(provider.name, directory.path)
                ]
            if not scoped:
                continue
            title = provider.display.title if provider.display is not None else provider.name
            self._cache.mark_loading(query, provider.name, title, [s for s, _ in scoped])
            calls.extend((provider, scope, directory) for scope, directory in scoped)

        logger.query_dispatched(query, generation, len(calls))
        self._schedule_loading_notice(generation)
        await asyncio.gather(
            *(
                self._query_provider(generation, query, provider, scope, directory)
                for provider, scope, directory in calls
            )
        )

    async def _query_provider(
        self,
        generation: int,
        query: str,
        provider: Provider,
        scope: str,
        directory: DirectoryLike | None,
    ) -> None:
        start = time.monotonic()
        results: list[dict[str, Any]] = []
        error: ProviderExecutionError | None = None
        try:
            if directory is None:
                raw = await provider.execute_query(query)
            else:
                raw = await provider.execute_query(query, directory)
            results = [wrap_result(item, provider.name) for item in raw or []]
        except Exception as e:
            error = ProviderExecutionError(provider.name, query, scope, e)
        elapsed = time.monotonic() - start

        if not self._accepts(generation, provider, scope):
            return
        if error is not None:
            logger.provider_failed(provider.name, scope, str(error), elapsed)
            mutated = self._cache.settle(query, provider.name, scope, error=str(error))
        else:
            logger.provider_settled(provider.name, scope, len(results), elapsed)
            mutated = self._cache.settle(query, provider.name, scope, results=results)
        if mutated:
            self._schedule_results_changed()

    def _accepts(self, generation: int, provider: Provider, scope: str) -> bool:
        if self.disposed:
            logger.stale_discarded(provider.name, scope, generation, None)
            return False
        if generation != self._generation:
            logger.stale_discarded(provider.name, scope, generation, self._generation)
            return False
        # Removed while its call was in flight.
        return self._catalog.get_provider(provider.name) is provider

    def _schedule_results_changed(self) -> None:
        # One notification per loop tick, however many calls settled in it.
        if self._flush_handle is None:
            self._flush_handle = asyncio.get_running_loop().call_soon(
                self._flush_results_changed
            )

    def _flush_results_changed(self) -> None:
        self._flush_handle = None
        if self.disposed:
            return
        self._bus.emit(ChangeEvent.RESULTS_CHANGED)

    def _schedule_loading_notice(self, generation: int) -> None:
        if self._loading_handle is not None:
            self._loading_handle.cancel()
        self._loading_handle = asyncio.get_running_loop().call_later(
            self._loading_event_delay_ms / 1000, self._emit_loading_notice, generation
        )

    def _emit_loading_notice(self, generation: int) -> None:
        self._loading_handle = None
        if self.disposed or generation != self._generation or self._current_query is None:
            return
        if self._cache.is_loading(self._current_query):
            self._bus.emit(ChangeEvent.RESULTS_CHANGED)

    # -- reads ------------------------------------------------------------

    def get_results(self, query: str, provider_name: str) -> QueryResult | None:
        """Cached entry for (query, provider), or None if it has none yet.

        The omnisearch tab has no entry of its own; use get_omnisearch_results.
        """
        return self._cache.get(normalize_query(query), provider_name)

    def get_omnisearch_results(self, query: str) -> dict[str, QueryResult]:
        """Every renderable provider's entry for query, in render order.

        Each scope is truncated to the first few results.
        """
        query = normalize_query(query)
        aggregated: dict[str, QueryResult] = {}
        for spec in self._catalog.get_renderable_providers():
            if spec.name == OMNISEARCH_PROVIDER_NAME:
                continue
            entry = self._cache.get(query, spec.name)
            if entry is None:
                continue
            for scoped in entry.results.values():
                scoped.results = scoped.results[: self._max_omni_results]
            aggregated[spec.name] = entry
        return aggregated

    # -- lifecycle --------------------------------------------------------

    def dispose(self) -> None:
        """Tear down. No notification fires and no settlement lands afterwards."""
        if self.disposed:
            return
        self.disposed = True
        self._debounced_query.dispose()
        self._debounced_update_directories.dispose()
        for handle in (self._loading_handle, self._flush_handle):
            if handle is not None:
                handle.cancel()
        self._loading_handle = None
        self._flush_handle = None
        self._subscriptions.dispose()
        self._catalog.dispose()
        self._cache.clear()
        self._bus.dispose()
