"""Synchronous event bus for conversion lifecycle events."""

from __future__ import annotations

from typing import Any, Callable

Listener = Callable[[Any], None]


class EventBus:
    """Publish-subscribe dispatch of conversion events.

    Listeners subscribe to one event type or to every event. Dispatch is
    synchronous, global listeners first, then typed listeners in
    registration order. A listener exception propagates to the emitter.
    """

    def __init__(self) -> None:
        self._listeners: dict[type, list[Listener]] = {}
        self._global_listeners: list[Listener] = []
        self.emitted = 0

    def subscribe(self, event_type: type, callback: Listener) -> None:
        self._listeners.setdefault(event_type, []).append(callback)

    def unsubscribe(self, event_type: type, callback: Listener) -> None:
        listeners = self._listeners.get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)

    def on_all(self, callback: Listener) -> None:
        """Register a callback that receives every event."""
        self._global_listeners.append(callback)

    def emit(self, event: Any) -> None:
        self.emitted += 1
        for cb in list(self._global_listeners):
            cb(event)
        for cb in list(self._listeners.get(type(event), [])):
            cb(event)
