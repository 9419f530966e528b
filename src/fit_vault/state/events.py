"""
Typed event bus for live session updates.

Listeners receive an Event; a listener subscribed to "*" receives every
event. A failing listener is logged and does not stop delivery to others.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

from loguru import logger

EventName = Literal[
    "session.started",
    "session.loaded",
    "session.paused",
    "session.resumed",
    "session.finished",
    "session.discarded",
    "exercise.added",
    "exercise.removed",
    "exercise.reordered",
    "exercise.selected",
    "set.started",
    "set.logged",
    "set.edited",
    "set.deleted",
    "countdown.tick",
    "countdown.complete",
    "rpe.changed",
    "muscle.changed",
    "timer.started",
    "timer.tick",
    "timer.cancelled",
    "timer.extended",
    "duration.tick",
]

ALL_EVENTS = "*"


@dataclass(frozen=True)
class Event:
    name: str
    payload: dict[str, Any] = field(default_factory=dict)


Listener = Callable[[Event], None]
Emitter = Callable[..., None]


class EventBus:
    def __init__(self):
        self._listeners: dict[str, list[Listener]] = {}

    def subscribe(self, event: EventName | Literal["*"], listener: Listener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            Callable that removes the listener again
        """
        self._listeners.setdefault(event, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(event, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def emit(self, name: EventName, payload: dict[str, Any] | None = None) -> None:
        event = Event(name, payload or {})
        # Copy so listeners may unsubscribe while being notified
        listeners = list(self._listeners.get(name, [])) + list(self._listeners.get(ALL_EVENTS, []))
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Listener for {} failed", name)

    def clear(self) -> None:
        self._listeners.clear()
