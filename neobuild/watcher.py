"""Base classes for watching the build process. Every step of resolution, fetching and
assembly reports its progress and its non-fatal problems as event objects given to a
watcher, the library itself never prints anything.
"""

from typing import Any, Callable, Dict


class Watcher:
    """Base class for a watcher of the build process.
    """

    def handle(self, event: Any) -> None:
        """Called when the watcher can handle the given event. Default implementation
        does nothing.
        """


class SimpleWatcher(Watcher):

    def __init__(self, handlers: Dict[type, Callable[[Any], None]]) -> None:
        self.handlers = handlers

    def handle(self, event: Any) -> None:
        handler = self.handlers.get(type(event))
        if handler is not None:
            handler(event)
