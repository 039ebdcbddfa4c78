"""GUI-side services: lifecycle event bus and log capture."""

from .event_bus import Event, EventBus, HeatmapEvent  # noqa: F401
from .logging_service import LogEntry, LoggingService  # noqa: F401

__all__ = [
    "Event",
    "EventBus",
    "HeatmapEvent",
    "LogEntry",
    "LoggingService",
]
