"""Tests for event fan-out backends."""

import json

import redis

from wtf_dial.core.settings import Settings
from wtf_dial.services.events import (
    DialValueChangedPayload,
    Event,
    EventType,
    InMemoryEventService,
    RedisEventService,
    build_event_service,
    channel_for,
)


def _event(value: int = 7) -> Event:
    return Event(
        type=EventType.DIAL_VALUE_CHANGED,
        payload=DialValueChangedPayload(id=1, value=value),
    )


def test_in_memory_delivers_to_subscribers_of_the_user() -> None:
    service = InMemoryEventService()
    alice = service.subscribe(1)
    bob = service.subscribe(2)

    service.publish_event(1, _event())

    assert alice.get(timeout=0.1) == _event()
    assert bob.get(timeout=0.01) is None


def test_in_memory_publish_without_subscribers_is_a_no_op() -> None:
    InMemoryEventService().publish_event(42, _event())


def test_in_memory_close_subscription_stops_delivery() -> None:
    service = InMemoryEventService()
    with service.subscribe(1) as subscription:
        assert service.subscriber_count(1) == 1
    assert service.subscriber_count(1) == 0

    service.publish_event(1, _event())
    assert subscription.get(timeout=0.01) is None


def test_in_memory_full_buffer_drops_newest_event() -> None:
    service = InMemoryEventService(buffer_size=1)
    subscription = service.subscribe(1)

    service.publish_event(1, _event(1))
    service.publish_event(1, _event(2))

    assert subscription.get(timeout=0.1).payload.value == 1
    assert subscription.get(timeout=0.01) is None


def test_in_memory_close_drops_all_subscriptions() -> None:
    service = InMemoryEventService()
    service.subscribe(1)
    service.subscribe(1)
    service.close()
    assert service.subscriber_count(1) == 0


def test_redis_publishes_json_on_user_channel(mocker) -> None:
    client = mocker.MagicMock()
    service = RedisEventService(client)

    service.publish_event(5, _event(33))

    channel, data = client.publish.call_args.args
    assert channel == channel_for(5) == "wtf:user:5"
    assert json.loads(data) == {"type": "dial.value_changed", "payload": {"id": 1, "value": 33}}


def test_redis_publish_errors_are_swallowed(mocker) -> None:
    client = mocker.MagicMock()
    client.publish.side_effect = redis.ConnectionError("down")

    RedisEventService(client).publish_event(5, _event())

    client.publish.assert_called_once()


def test_redis_subscription_decodes_messages(mocker) -> None:
    client = mocker.MagicMock()
    pubsub = client.pubsub.return_value
    pubsub.get_message.return_value = {"type": "message", "data": _event(12).model_dump_json()}

    subscription = RedisEventService(client).subscribe(5)

    pubsub.subscribe.assert_called_once_with("wtf:user:5")
    assert subscription.get(timeout=0.1) == _event(12)
    subscription.close()
    pubsub.close.assert_called_once()


def test_build_event_service_selects_backend(mocker) -> None:
    memory = build_event_service(Settings(SECRET_KEY="x", EVENT_BACKEND="memory"))
    assert isinstance(memory, InMemoryEventService)

    from_url = mocker.patch("wtf_dial.services.events.redis.from_url")
    backend = build_event_service(Settings(SECRET_KEY="x", EVENT_BACKEND="redis", REDIS_URL="redis://cache:6379"))
    assert isinstance(backend, RedisEventService)
    from_url.assert_called_once_with("redis://cache:6379")
