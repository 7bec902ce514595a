"""Per-query result cache keyed by (normalized query, provider name)."""

from collections import OrderedDict
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel

from omnisearch.contracts.quick_open_v1 import QueryResult, ScopedResults


def wrap_result(raw: Any, provider_name: str) -> dict[str, Any]:
    """Copy a raw provider result and tag it with the provider that produced it."""
    if isinstance(raw, BaseModel):
        item = raw.model_dump()
    elif isinstance(raw, Mapping):
        item = dict(raw)
    else:
        raise TypeError(
            f"{provider_name} returned {type(raw).__name__}; results must be mappings"
        )
    item["source_provider"] = provider_name
    return item


class ResultCache:
    """Least-recently-used cache of QueryResult entries.

    Only the orchestrator writes; readers get deep copies.
    """

    def __init__(self, max_queries: int = 50) -> None:
        self._max_queries = max(1, max_queries)
        self._entries: OrderedDict[str, dict[str, QueryResult]] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, query: str) -> bool:
        return query in self._entries

    def mark_loading(self, query: str, provider_name: str, title: str, scopes: Iterable[str]) -> None:
        """Create (or reuse) the entry for a dispatch and flag every scope as loading.

        Previous results for a scope are kept while it reloads.
        """
        by_provider = self._entries.setdefault(query, {})
        self._entries.move_to_end(query)
        previous = by_provider.get(provider_name)
        results: dict[str, ScopedResults] = {}
        for scope in scopes:
            old = previous.results.get(scope) if previous is not None else None
            results[scope] = ScopedResults(
                results=list(old.results) if old is not None and old.error is None else [],
                loading=True,
                error=None,
            )
        by_provider[provider_name] = QueryResult(title=title, results=results)
        self._evict()

    def settle(
        self,
        query: str,
        provider_name: str,
        scope: str,
        results: list[dict[str, Any]] | None = None,
        error: str | None = None,
    ) -> bool:
        """Store the outcome of one provider call. Returns False if there is no entry."""
        entry = self._entries.get(query, {}).get(provider_name)
        if entry is None or scope not in entry.results:
            return False
        if error is not None:
            entry.results[scope] = ScopedResults(results=[], loading=False, error=error)
        else:
            entry.results[scope] = ScopedResults(results=results or [], loading=False, error=None)
        return True

    def get(self, query: str, provider_name: str) -> QueryResult | None:
        entry = self._entries.get(query, {}).get(provider_name)
        return entry.model_copy(deep=True) if entry is not None else None

    def is_loading(self, query: str) -> bool:
        return any(entry.loading for entry in self._entries.get(query, {}).values())

    def drop_loading(self, query: str) -> None:
        """Settle scopes of query still waiting on a superseded dispatch.

        A scope that kept results from an earlier dispatch falls back to them;
        a scope with nothing to show is removed.
        """
        by_provider = self._entries.get(query)
        if by_provider is None:
            return
        for name in list(by_provider):
            entry = by_provider[name]
            kept: dict[str, ScopedResults] = {}
            for scope, scoped in entry.results.items():
                if not scoped.loading:
                    kept[scope] = scoped
                elif scoped.results:
                    kept[scope] = ScopedResults(results=scoped.results, loading=False)
            entry.results = kept
            if not entry.results:
                del by_provider[name]
        if not by_provider:
            del self._entries[query]

    def remove_provider(self, provider_name: str) -> None:
        for query in list(self._entries):
            by_provider = self._entries[query]
            by_provider.pop(provider_name, None)
            if not by_provider:
                del self._entries[query]

    def clear(self) -> None:
        self._entries.clear()

    def _evict(self) -> None:
        while len(self._entries) > self._max_queries:
            self._entries.popitem(last=False)
