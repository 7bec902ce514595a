"""Disposables and a named-channel event emitter.

Every subscription returns a Disposable; disposing it removes the handler.
An Emitter that has been disposed drops every later emit().
"""

from collections.abc import Callable
from typing import Any

from omnisearch.core.logger import logger


class Disposable:
    """Runs a teardown callback at most once."""

    def __init__(self, on_dispose: Callable[[], Any] | None = None) -> None:
        self._on_dispose = on_dispose
        self.disposed = False

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        callback, self._on_dispose = self._on_dispose, None
        if callback is not None:
            callback()


class CompositeDisposable:
    """Groups disposables so they can be torn down together."""

    def __init__(self, *disposables: Disposable) -> None:
        self._disposables: list[Disposable] = list(disposables)
        self.disposed = False

    def add(self, *disposables: Disposable) -> None:
        if self.disposed:
            for d in disposables:
                d.dispose()
            return
        self._disposables.extend(disposables)

    def dispose(self) -> None:
        if self.disposed:
            return
        self.disposed = True
        disposables, self._disposables = self._disposables, []
        for d in disposables:
            d.dispose()


class Emitter:
    """Synchronous observer registry keyed by event name.

    Handlers are called in subscription order. A handler that raises is
    logged and skipped; the remaining handlers still run.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Callable[..., Any]]] = {}
        self.disposed = False

    def on(self, event: str, handler: Callable[..., Any]) -> Disposable:
        if self.disposed:
            return Disposable()
        self._handlers.setdefault(event, []).append(handler)
        return Disposable(lambda: self._off(event, handler))

    def _off(self, event: str, handler: Callable[..., Any]) -> None:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, *args: Any) -> None:
        if self.disposed:
            return
        # Copy: handlers may unsubscribe themselves while being called.
        for handler in list(self._handlers.get(event, [])):
            if self.disposed:
                return
            try:
                handler(*args)
            except Exception:
                logger.exception("Listener for '%s' raised", event)

    def dispose(self) -> None:
        self.disposed = True
        self._handlers.clear()
