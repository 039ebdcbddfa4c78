"""Synchronous publish/subscribe for heatmap lifecycle notifications.

The lifecycle manager announces what happened to the rendering surface
(dataset loaded, rendered, disposed, retrieval failed); the Qt view shows
retrieval failures in its description label and tests record the sequence.

 - Dispatch happens on the publishing thread, in subscription order
 - A failing handler is logged and recorded in ``errors``; later handlers still run
 - ``once=True`` subscriptions are dropped after their first successful call
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from time import perf_counter
from typing import Any, Dict, List, Protocol

log = logging.getLogger(__name__)

__all__ = [
    "HeatmapEvent",
    "Event",
    "EventBus",
    "EventHandler",
    "Subscription",
]


class HeatmapEvent(str, Enum):
    DATASET_LOADED = "dataset_loaded"
    EMPTY_DATASET = "empty_dataset"
    RETRIEVAL_FAILED = "retrieval_failed"
    FETCH_DISCARDED = "fetch_discarded"
    HEATMAP_RENDERED = "heatmap_rendered"
    HEATMAP_DISPOSED = "heatmap_disposed"


@dataclass
class Event:
    name: str  # HeatmapEvent value or custom string
    payload: Any
    timestamp: float


class EventHandler(Protocol):  # noqa: D401 - protocol signature docs implicit
    def __call__(self, event: Event) -> None: ...  # pragma: no cover - structural


@dataclass
class Subscription:
    event: str
    handler: EventHandler
    once: bool
    active: bool = True

    def cancel(self) -> None:
        self.active = False


def _key(name: str | HeatmapEvent) -> str:
    return name.value if isinstance(name, HeatmapEvent) else name


class EventBus:
    def __init__(self) -> None:
        self._subs: Dict[str, List[Subscription]] = {}
        self._errors: List[tuple[Event, Exception]] = []

    # Subscription management -----------------------------------------
    def subscribe(
        self, name: str | HeatmapEvent, handler: EventHandler, *, once: bool = False
    ) -> Subscription:
        sub = Subscription(event=_key(name), handler=handler, once=once)
        self._subs.setdefault(sub.event, []).append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        bucket = self._subs.get(sub.event)
        if bucket and sub in bucket:
            bucket.remove(sub)
            if not bucket:
                self._subs.pop(sub.event, None)
        sub.active = False

    def clear(self) -> None:
        self._subs.clear()
        self._errors.clear()

    # Publishing --------------------------------------------------------
    def publish(self, name: str | HeatmapEvent, payload: Any = None) -> Event:
        key = _key(name)
        evt = Event(name=key, payload=payload, timestamp=perf_counter())
        # Snapshot so handlers may (un)subscribe while we iterate
        for sub in list(self._subs.get(key, ())):
            if not sub.active:
                continue
            try:
                sub.handler(evt)
            except Exception as exc:  # noqa: BLE001 - isolate handler failures
                log.exception("handler for %s failed", key)
                self._errors.append((evt, exc))
            else:
                if sub.once:
                    self.unsubscribe(sub)
        return evt

    # Introspection -----------------------------------------------------
    def subscriber_count(self, name: str | HeatmapEvent) -> int:
        return len(self._subs.get(_key(name), ()))

    @property
    def errors(self) -> list[tuple[Event, Exception]]:
        return list(self._errors)
