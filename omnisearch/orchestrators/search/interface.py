"""Standard interface for quick-open providers and the host's directories.

Providers come in two variants, told apart by their provider_type tag:
GlobalProvider answers a query once, DirectoryProvider answers it once per
project directory it is eligible for. Provider work is never aborted: when a
newer query supersedes an older one, the older call still runs to completion
and its results are simply ignored.
"""

import math
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Protocol

from omnisearch.contracts.quick_open_v1 import ProviderDisplay, ProviderType
from omnisearch.core.events import Disposable


@dataclass(frozen=True)
class Directory:
    """Opaque handle on a project directory. Identity is the path."""

    path: str


class DirectoryLike(Protocol):
    path: str


class DirectorySource(Protocol):
    """Host collaborator that knows the current project directories."""

    def get_directories(self) -> Sequence[DirectoryLike]: ...

    def on_did_change_directories(self, callback: Callable[[], Any]) -> Disposable: ...


class Provider(ABC):
    """Base class for all quick-open providers."""

    provider_type: ClassVar[ProviderType]
    display: ProviderDisplay | None = None
    # Lower sorts first. Providers that declare nothing sort after the
    # omnisearch tab in registration order.
    priority: float = math.inf

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique provider identifier."""


class GlobalProvider(Provider):
    """Provider queried once per query, independent of project directories."""

    provider_type = ProviderType.GLOBAL

    @abstractmethod
    async def execute_query(self, query: str) -> Sequence[Mapping[str, Any]]:
        """Return raw results for query."""


class DirectoryProvider(Provider):
    """Provider queried once per eligible project directory."""

    provider_type = ProviderType.DIRECTORY

    async def is_eligible_for_directory(self, directory: DirectoryLike) -> bool:
        return True

    @abstractmethod
    async def execute_query(
        self, query: str, directory: DirectoryLike
    ) -> Sequence[Mapping[str, Any]]:
        """Return raw results for query within directory."""
