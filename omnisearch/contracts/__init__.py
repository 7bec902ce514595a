"""Contracts: shared types between providers, orchestrator and UI."""

from omnisearch.contracts.quick_open_v1 import (
    GLOBAL_KEY,
    OMNISEARCH_PROVIDER_NAME,
    OMNISEARCH_PROVIDER_SPEC,
    ChangeEvent,
    ProviderDisplay,
    ProviderSpec,
    ProviderType,
    QueryResult,
    ScopedResults,
)

__all__ = [
    "GLOBAL_KEY",
    "OMNISEARCH_PROVIDER_NAME",
    "OMNISEARCH_PROVIDER_SPEC",
    "ChangeEvent",
    "ProviderDisplay",
    "ProviderSpec",
    "ProviderType",
    "QueryResult",
    "ScopedResults",
]
