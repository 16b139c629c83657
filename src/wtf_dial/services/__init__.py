"""Business logic services for the WTF Dial application."""

from .dial_pipeline import RefreshOutcome, refresh_dial_value
from .dial_service import DialService
from .events import (
    DialValueChangedPayload,
    Event,
    EventService,
    EventType,
    InMemoryEventService,
    RedisEventService,
    build_event_service,
)
from .metrics import ErrorMetrics

__all__ = [
    "DialService",
    "DialValueChangedPayload",
    "ErrorMetrics",
    "Event",
    "EventService",
    "EventType",
    "InMemoryEventService",
    "RedisEventService",
    "RefreshOutcome",
    "build_event_service",
    "refresh_dial_value",
]
