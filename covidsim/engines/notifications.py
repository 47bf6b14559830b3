"""
Typed notifications emitted by the simulation engine.

Events are queued with ``emit()`` while a simulated day is computed and
delivered with ``drain()`` once the day is complete, so subscribers never
observe a partial day::

    bus.subscribe("VariantChanged", handler)
    bus.subscribe(Tick, other_handler)
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable

from ..models import HistoricalEvent, Variant


@dataclass
class Tick:
    """One simulated day completed."""
    snapshot: dict


@dataclass
class VariantChanged:
    variant_id: str
    variant: Variant
    date: date


@dataclass
class HistoricalEventFired:
    event: HistoricalEvent


@dataclass
class SimulationReset:
    snapshot: dict


class NotificationBus:
    def __init__(self):
        self._queue: list[Any] = []
        self._subs: dict[str, list[Callable]] = defaultdict(list)
        self._stats: dict[str, int] = defaultdict(int)

    def emit(self, event) -> None:
        self._queue.append(event)

    def subscribe(self, event_type, handler: Callable) -> None:
        """*event_type* is a notification class or its name."""
        name = event_type if isinstance(event_type, str) else event_type.__name__
        self._subs[name].append(handler)

    def unsubscribe(self, event_type, handler: Callable) -> bool:
        name = event_type if isinstance(event_type, str) else event_type.__name__
        handlers = self._subs.get(name, [])
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def drain(self) -> int:
        """Deliver every queued notification once, in FIFO order."""
        batch = self._queue[:]
        self._queue.clear()
        for event in batch:
            name = type(event).__name__
            self._stats[name] += 1
            for handler in list(self._subs.get(name, [])):
                try:
                    handler(event)
                except Exception as e:
                    # A failing consumer must not stop the run loop
                    print(f"Notification Error ({name}): {e}")
        return len(batch)

    def clear(self) -> None:
        self._queue.clear()

    def stats(self) -> dict[str, int]:
        return dict(self._stats)

    def pending_count(self) -> int:
        return len(self._queue)
