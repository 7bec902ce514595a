"""Quick-open search: provider catalog, debounced dispatch and result cache."""

from omnisearch.orchestrators.search.interface import (
    Directory,
    DirectoryProvider,
    GlobalProvider,
    Provider,
)
from omnisearch.orchestrators.search.orchestrator import SearchResultOrchestrator
from omnisearch.orchestrators.search.project import ProjectDirectories
from omnisearch.orchestrators.search.registry import ProviderRegistry

__all__ = [
    "Directory",
    "DirectoryProvider",
    "GlobalProvider",
    "ProjectDirectories",
    "Provider",
    "ProviderRegistry",
    "SearchResultOrchestrator",
]
