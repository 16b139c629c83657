"""Event fan-out to users.

Events are ephemeral: nothing is persisted and publishing never waits for
delivery. Two backends exist:

- ``InMemoryEventService`` hands events to subscriptions held by this process.
- ``RedisEventService`` publishes JSON onto per-user Redis channels so that
  other processes (e.g. a websocket relay) can pick them up.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections import defaultdict
from enum import Enum
from typing import Any, Protocol

import redis
from pydantic import BaseModel

from wtf_dial.core.settings import Settings

logger = logging.getLogger(__name__)

CHANNEL_PREFIX = "wtf:user:"


class EventType(str, Enum):
    """Known event types."""

    DIAL_VALUE_CHANGED = "dial.value_changed"


class DialValueChangedPayload(BaseModel):
    """Payload announcing a dial's new aggregate value."""

    id: int
    value: int


class Event(BaseModel):
    """A typed notification addressed to a user at publish time."""

    type: EventType
    payload: DialValueChangedPayload


class Subscription(Protocol):
    """A stream of events for one user."""

    user_id: int

    def get(self, timeout: float | None = None) -> Event | None: ...

    def close(self) -> None: ...


class EventService(Protocol):
    """Publish/subscribe collaborator used by the notifier."""

    def publish_event(self, user_id: int, event: Event) -> None: ...

    def subscribe(self, user_id: int) -> Subscription: ...

    def close(self) -> None: ...


def channel_for(user_id: int) -> str:
    """Return the Redis channel carrying events for ``user_id``."""
    return f"{CHANNEL_PREFIX}{user_id}"


class InMemorySubscription:
    """Bounded queue of events delivered to one user in this process."""

    def __init__(self, service: InMemoryEventService, user_id: int, buffer_size: int) -> None:
        self.user_id = user_id
        self._service = service
        self._queue: queue.Queue[Event] = queue.Queue(maxsize=buffer_size)

    def offer(self, event: Event) -> bool:
        """Enqueue without blocking; return False if the buffer is full."""
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            return False
        return True

    def get(self, timeout: float | None = None) -> Event | None:
        """Return the next event, or None if none arrives within ``timeout``."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def close(self) -> None:
        """Stop receiving events."""
        self._service.unsubscribe(self)

    def __enter__(self) -> InMemorySubscription:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class InMemoryEventService:
    """Process-local event fan-out.

    A subscriber that stops reading loses events once its buffer fills;
    publishers are never blocked.
    """

    def __init__(self, buffer_size: int = 100) -> None:
        self.buffer_size = buffer_size
        self._lock = threading.Lock()
        self._subscriptions: dict[int, set[InMemorySubscription]] = defaultdict(set)

    def publish_event(self, user_id: int, event: Event) -> None:
        """Deliver ``event`` to every subscription of ``user_id``."""
        with self._lock:
            subscriptions = list(self._subscriptions.get(user_id, ()))
        for subscription in subscriptions:
            if not subscription.offer(event):
                logger.warning("Dropping %s for user %d: buffer full", event.type.value, user_id)

    def subscribe(self, user_id: int) -> InMemorySubscription:
        """Open a subscription for ``user_id``."""
        subscription = InMemorySubscription(self, user_id, self.buffer_size)
        with self._lock:
            self._subscriptions[user_id].add(subscription)
        return subscription

    def unsubscribe(self, subscription: InMemorySubscription) -> None:
        """Remove a subscription; unknown subscriptions are ignored."""
        with self._lock:
            subscriptions = self._subscriptions.get(subscription.user_id)
            if subscriptions is None:
                return
            subscriptions.discard(subscription)
            if not subscriptions:
                del self._subscriptions[subscription.user_id]

    def subscriber_count(self, user_id: int) -> int:
        """Return the number of open subscriptions for ``user_id``."""
        with self._lock:
            return len(self._subscriptions.get(user_id, ()))

    def close(self) -> None:
        """Drop every subscription."""
        with self._lock:
            self._subscriptions.clear()


class RedisSubscription:
    """Events for one user read from a Redis pub/sub channel."""

    def __init__(self, client: redis.Redis, user_id: int) -> None:
        self.user_id = user_id
        self._pubsub = client.pubsub(ignore_subscribe_messages=True)
        self._pubsub.subscribe(channel_for(user_id))

    def get(self, timeout: float | None = None) -> Event | None:
        """Return the next event, or None if none arrives within ``timeout``."""
        message = self._pubsub.get_message(timeout=timeout or 0.0)
        if message is None or message.get("type") != "message":
            return None
        return Event.model_validate_json(message["data"])

    def close(self) -> None:
        """Unsubscribe and release the pub/sub connection."""
        self._pubsub.close()

    def __enter__(self) -> RedisSubscription:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class RedisEventService:
    """Publish events onto per-user Redis channels.

    Publishing is fire-and-forget: Redis errors are logged and dropped.
    """

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> RedisEventService:
        """Build the service from a Redis URL."""
        return cls(redis.from_url(url))  # type: ignore[no-untyped-call]

    def publish_event(self, user_id: int, event: Event) -> None:
        """Publish ``event`` on the channel of ``user_id``."""
        try:
            self._client.publish(channel_for(user_id), event.model_dump_json())
        except redis.RedisError as exc:
            logger.warning(
                "Failed to publish %s for user %d: %s", event.type.value, user_id, exc
            )

    def subscribe(self, user_id: int) -> RedisSubscription:
        """Open a subscription for ``user_id``."""
        return RedisSubscription(self._client, user_id)

    def close(self) -> None:
        """Close the Redis connection pool."""
        self._client.close()


def build_event_service(settings: Settings) -> EventService:
    """Return the event backend selected by ``EVENT_BACKEND``."""
    if settings.event_backend == "redis":
        return RedisEventService.from_url(settings.redis_url)
    return InMemoryEventService(buffer_size=settings.event_buffer_size)
