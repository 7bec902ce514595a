"""Quick-open contract v1.

Defines the canonical types shared by providers, the orchestrator and the UI:
  - Provider tagging (ProviderType) and display metadata (ProviderDisplay)
  - Renderable provider metadata (ProviderSpec)
  - Per-(query, provider) cache entries (QueryResult, ScopedResults)

Providers return plain mappings; the orchestrator wraps each one with the
name of the provider that produced it before storing it.
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

GLOBAL_KEY = "global"
DEFAULT_QUERY_DEBOUNCE_DELAY_MS = 200

OMNISEARCH_PROVIDER_NAME = "OmniSearchResultProvider"


# ---------------------------------------------------------------------------
# Provider tagging
# ---------------------------------------------------------------------------


class ProviderType(StrEnum):
    GLOBAL = "GLOBAL"
    DIRECTORY = "DIRECTORY"


class ChangeEvent(StrEnum):
    """Channels on the orchestrator's notification bus."""

    PROVIDERS_CHANGED = "providers-changed"
    RESULTS_CHANGED = "results-changed"


# ---------------------------------------------------------------------------
# Display metadata
# ---------------------------------------------------------------------------


class ProviderDisplay(BaseModel):
    """How a provider presents itself in the quick-open UI."""

    title: str = Field(description="Tab title, e.g. 'Filenames'")
    prompt: str = Field(description="Placeholder shown in the query box")
    action: str = Field(
        default="", description="Host command that opens this provider's tab"
    )
    can_open_all: bool = Field(default=False)
    debounce_delay: int | None = Field(
        default=None,
        ge=0,
        description="Query debounce window in ms. None = orchestrator default.",
    )


class ProviderSpec(BaseModel):
    """Immutable, UI-facing view of one provider."""

    model_config = ConfigDict(frozen=True)

    action: str = ""
    can_open_all: bool = False
    debounce_delay: int = DEFAULT_QUERY_DEBOUNCE_DELAY_MS
    name: str
    prompt: str
    title: str
    priority: float = math.inf


OMNISEARCH_PROVIDER_SPEC = ProviderSpec(
    action="omnisearch:find-anything",
    can_open_all=False,
    debounce_delay=DEFAULT_QUERY_DEBOUNCE_DELAY_MS,
    name=OMNISEARCH_PROVIDER_NAME,
    prompt="Search for anything...",
    title="OmniSearch",
    priority=math.inf,
)


# ---------------------------------------------------------------------------
# Query results
# ---------------------------------------------------------------------------


class ScopedResults(BaseModel):
    """Results of one provider for one scope ('global' or a directory path)."""

    results: list[dict[str, Any]] = Field(default_factory=list)
    loading: bool = False
    error: str | None = None


class QueryResult(BaseModel):
    """Cache entry for one (query, provider) pair."""

    title: str
    results: dict[str, ScopedResults] = Field(default_factory=dict)

    @property
    def loading(self) -> bool:
        return any(scoped.loading for scoped in self.results.values())
