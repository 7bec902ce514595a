"""omnisearch: one "search everything" view over many asynchronous providers."""

from omnisearch.contracts.quick_open_v1 import (
    OMNISEARCH_PROVIDER_NAME,
    ProviderDisplay,
    ProviderSpec,
    ProviderType,
    QueryResult,
    ScopedResults,
)
from omnisearch.orchestrators.search import (
    Directory,
    DirectoryProvider,
    GlobalProvider,
    ProjectDirectories,
    Provider,
    ProviderRegistry,
    SearchResultOrchestrator,
)

__all__ = [
    "OMNISEARCH_PROVIDER_NAME",
    "Directory",
    "DirectoryProvider",
    "GlobalProvider",
    "ProjectDirectories",
    "Provider",
    "ProviderDisplay",
    "ProviderRegistry",
    "ProviderSpec",
    "ProviderType",
    "QueryResult",
    "ScopedResults",
    "SearchResultOrchestrator",
]
