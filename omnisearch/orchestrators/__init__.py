"""Orchestrators: aggregate many asynchronous providers into one view."""

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
    "Directory",
    "DirectoryProvider",
    "GlobalProvider",
    "ProjectDirectories",
    "Provider",
    "ProviderRegistry",
    "SearchResultOrchestrator",
]
