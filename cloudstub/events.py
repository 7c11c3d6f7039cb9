"""Minimal synchronous event emitter used as the base of synthetic objects."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from cloudstub.exceptions import UnhandledErrorEvent

if TYPE_CHECKING:
    from collections.abc import Callable

_ERROR_EVENT = "error"


class EventEmitter:
    """Register listeners per event name and call them in order on ``emit``."""

    def __init__(self) -> None:
        """Start with no listeners."""
        self._listeners: dict[str, list[Callable[..., Any]]] = {}

    def on(self, event: str, listener: Callable[..., Any]) -> EventEmitter:
        """Append *listener* for *event*.  Returns self for chaining."""
        self._listeners.setdefault(event, []).append(listener)
        return self

    add_listener = on

    def once(self, event: str, listener: Callable[..., Any]) -> EventEmitter:
        """Append *listener* for a single delivery of *event*."""

        def _once(*args: Any) -> None:
            self.remove_listener(event, _once)
            listener(*args)

        _once.listener = listener  # type: ignore[attr-defined]
        return self.on(event, _once)

    def remove_listener(
        self, event: str, listener: Callable[..., Any]
    ) -> EventEmitter:
        """Remove the most recent registration of *listener* for *event*, if any.

        Listeners added with ``once`` can be removed by the original callable.
        """
        registered = self._listeners.get(event, [])
        for index in range(len(registered) - 1, -1, -1):
            candidate = registered[index]
            original = getattr(candidate, "listener", candidate)
            if listener in (candidate, original):
                del registered[index]
                break
        if not registered:
            self._listeners.pop(event, None)
        return self

    def remove_all_listeners(self, event: str | None = None) -> EventEmitter:
        """Drop listeners for *event*, or for every event when omitted."""
        if event is None:
            self._listeners.clear()
        else:
            self._listeners.pop(event, None)
        return self

    def listeners(self, event: str) -> list[Callable[..., Any]]:
        """Return a copy of the listeners registered for *event*."""
        return list(self._listeners.get(event, []))

    def listener_count(self, event: str) -> int:
        """Return the number of listeners registered for *event*."""
        return len(self._listeners.get(event, []))

    def event_names(self) -> list[str]:
        """Return the events that currently have listeners."""
        return list(self._listeners)

    def emit(self, event: str, *args: Any) -> bool:
        """Call every listener of *event* with *args*.

        Returns True if the event had listeners.  An ``error`` event with
        no listeners raises its payload (or ``UnhandledErrorEvent`` when the
        payload is not an exception).
        """
        registered = self.listeners(event)
        if not registered:
            if event == _ERROR_EVENT:
                payload = args[0] if args else None
                if isinstance(payload, BaseException):
                    raise payload
                msg = f"Unhandled 'error' event: {payload!r}"
                raise UnhandledErrorEvent(msg)
            return False
        for listener in registered:
            listener(*args)
        return True
