"""In-memory project directory source for hosts without one of their own."""

import logging
from collections.abc import Callable, Iterable
from typing import Any

from omnisearch.core.events import Disposable, Emitter
from omnisearch.orchestrators.search.interface import Directory

logger = logging.getLogger(__name__)

_DID_CHANGE = "did-change-directories"


class ProjectDirectories:
    """Ordered list of project roots, in the order they were added."""

    def __init__(self, paths: Iterable[str] = ()) -> None:
        self._directories: list[Directory] = []
        self._emitter = Emitter()
        for path in paths:
            if not self._contains(path):
                self._directories.append(Directory(path))

    def _contains(self, path: str) -> bool:
        return any(d.path == path for d in self._directories)

    def get_directories(self) -> list[Directory]:
        return list(self._directories)

    def get_paths(self) -> list[str]:
        return [d.path for d in self._directories]

    def add_path(self, path: str) -> None:
        if self._contains(path):
            return
        self._directories.append(Directory(path))
        logger.debug("Project root added: %s", path)
        self._emitter.emit(_DID_CHANGE)

    def remove_path(self, path: str) -> None:
        if not self._contains(path):
            return
        self._directories = [d for d in self._directories if d.path != path]
        logger.debug("Project root removed: %s", path)
        self._emitter.emit(_DID_CHANGE)

    def set_paths(self, paths: Iterable[str]) -> None:
        directories: list[Directory] = []
        for path in paths:
            if all(d.path != path for d in directories):
                directories.append(Directory(path))
        if [d.path for d in directories] == self.get_paths():
            return
        self._directories = directories
        self._emitter.emit(_DID_CHANGE)

    def on_did_change_directories(self, callback: Callable[[], Any]) -> Disposable:
        return self._emitter.on(_DID_CHANGE, callback)
