"""In-memory event bus.

Publish/subscribe for graph events.  Handlers run synchronously in
registration order; a handler subscribed to a base class also receives
its subclasses.  Implements the ``EventBus`` port.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable


class InMemoryEventBus:
    """Synchronous in-memory event bus."""

    def __init__(self) -> None:
        self._handlers: dict[type, list[Callable[..., Any]]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Callable[..., Any]) -> None:
        """Register *handler* to be called when *event_type* is published."""
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type, handler: Callable[..., Any]) -> bool:
        handlers = self._handlers.get(event_type, [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def publish(self, event: Any) -> None:
        """Dispatch *event* to the handlers of its type and of its bases."""
        for event_type in type(event).__mro__:
            for handler in list(self._handlers.get(event_type, [])):
                handler(event)

    def handler_count(self, event_type: type | None = None) -> int:
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(h) for h in self._handlers.values())


class EventRecorder:
    """Collects every published event; handy for editors and tests."""

    def __init__(self, bus: InMemoryEventBus) -> None:
        self.events: list[Any] = []
        bus.subscribe(object, self.events.append)

    def of_type(self, event_type: type) -> list[Any]:
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self) -> None:
        self.events.clear()
