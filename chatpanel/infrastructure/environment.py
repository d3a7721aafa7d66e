"""Capabilities the panel needs from its host page.

The panel never touches globals directly. The host hands it a
:class:`WidgetEnvironment` (element registry plus script load signals) and,
once the widget is on the page, a :class:`WidgetRuntime`. The in-memory
implementations below back the tests and any headless embedding.
"""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Iterable, Protocol

log = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class EventSource(Protocol):
    """Explicit subscribe/unsubscribe contract replacing global listeners."""

    def subscribe(self, event: str, listener: Listener) -> None: ...

    def unsubscribe(self, event: str, listener: Listener) -> None: ...


class WidgetEnvironment(EventSource, Protocol):
    def is_element_registered(self, name: str) -> bool: ...


class WidgetRuntime(EventSource, Protocol):
    """The live widget instance the panel sends transcript messages through."""

    async def send_user_message(self, text: str, reply: str | None = None) -> None: ...


class InMemoryEventSource:
    """Synchronous dispatcher keeping listeners per event name."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def subscribe(self, event: str, listener: Listener) -> None:
        self._listeners[event].append(listener)

    def unsubscribe(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def dispatch(self, event: str, detail: Any = None) -> None:
        for listener in list(self._listeners.get(event, ())):
            listener(detail)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))


class InMemoryWidgetEnvironment(InMemoryEventSource):
    """Environment whose element registry is a plain set."""

    def __init__(self, elements: Iterable[str] = ()) -> None:
        super().__init__()
        self._elements: set[str] = set(elements)

    def is_element_registered(self, name: str) -> bool:
        return name in self._elements

    def define_element(self, name: str) -> None:
        log.debug("element defined: %s", name)
        self._elements.add(name)


__all__ = [
    "EventSource",
    "InMemoryEventSource",
    "InMemoryWidgetEnvironment",
    "Listener",
    "WidgetEnvironment",
    "WidgetRuntime",
]
