"""Directory ordering: host order, with the current working root pinned first."""

from collections.abc import Iterable

from omnisearch.orchestrators.search.interface import DirectoryLike


class DirectoryRanker:
    """Tracks the host's directories and the current working root.

    The working root only affects ordering; it is never added to or removed
    from the tracked set.
    """

    def __init__(self) -> None:
        self._directories: list[DirectoryLike] = []
        self._current_working_root: DirectoryLike | None = None

    @property
    def directories(self) -> list[DirectoryLike]:
        """Tracked directories in host order."""
        return list(self._directories)

    @property
    def paths(self) -> list[str]:
        return [d.path for d in self._directories]

    def set_directories(self, directories: Iterable[DirectoryLike]) -> bool:
        """Replace the tracked directories. Returns True if the paths changed."""
        directories = list(directories)
        changed = [d.path for d in directories] != self.paths
        self._directories = directories
        return changed

    def set_current_working_root(self, directory: DirectoryLike | None) -> None:
        self._current_working_root = directory

    def sort_directories(self) -> list[DirectoryLike]:
        """Host order, with the working root (if tracked) moved to the front.

        A stable partition: every other directory keeps its relative order.
        """
        root = self._current_working_root
        if root is None:
            return list(self._directories)
        pinned = [d for d in self._directories if d.path == root.path]
        if not pinned:
            return list(self._directories)
        rest = [d for d in self._directories if d.path != root.path]
        return pinned + rest
