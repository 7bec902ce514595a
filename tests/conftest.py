import asyncio

import pytest
import pytest_asyncio

from omnisearch.orchestrators.search import (
    ProjectDirectories,
    ProviderRegistry,
    SearchResultOrchestrator,
)
from tests.fakes import PROJECT_ROOT1, PROJECT_ROOT2, PROJECT_ROOT3


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "property: property-based deterministic tests")


@pytest.fixture
def registry() -> ProviderRegistry:
    return ProviderRegistry()


@pytest.fixture
def project() -> ProjectDirectories:
    return ProjectDirectories([PROJECT_ROOT1, PROJECT_ROOT2, PROJECT_ROOT3])


@pytest_asyncio.fixture
async def orchestrator(registry, project):
    """Orchestrator without debounce delays and with the loading notice out of the way."""
    orch = SearchResultOrchestrator(
        registry,
        project,
        query_debounce_ms=0,
        directory_debounce_ms=0,
        loading_event_delay_ms=60_000,
    )
    yield orch
    orch.dispose()


@pytest.fixture
def settle():
    """Let pending callbacks and short-lived tasks run."""

    async def _settle(seconds: float = 0.01) -> None:
        await asyncio.sleep(seconds)

    return _settle
