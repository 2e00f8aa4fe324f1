"""
Test Raffle Event Publisher
Tests event ordering, atomic buffering and Redis publishing
"""

import json

import pytest
import redis

from utils.redis_publisher import CHANNEL, RaffleEventPublisher


class FakeRedis:
    def __init__(self, fail=False):
        self.fail = fail
        self.published = []

    def publish(self, channel, message):
        if self.fail:
            raise redis.ConnectionError("connection refused")
        self.published.append((channel, json.loads(message)))
        return 1


def test_without_redis_events_stay_in_process():
    publisher = RaffleEventPublisher()

    assert publisher.enabled is False
    assert publisher.publish_raffle_entered("alice") is False
    assert publisher.events == [{'action': 'raffle_entered', 'data': {'player': 'alice'}}]


def test_publishes_to_channel():
    client = FakeRedis()
    publisher = RaffleEventPublisher(client=client)

    assert publisher.publish_winner_picked("bob", 2**200)

    assert client.published == [
        (CHANNEL, {'action': 'winner_picked', 'data': {'winner': 'bob', 'prize': str(2**200)}})
    ]


def test_redis_failure_is_logged_not_raised():
    publisher = RaffleEventPublisher(client=FakeRedis(fail=True))

    assert publisher.publish_round_started() is False
    assert publisher.actions() == ['round_started']


def test_atomic_block_emits_on_success():
    client = FakeRedis()
    publisher = RaffleEventPublisher(client=client)

    with publisher.atomic():
        publisher.publish_winner_requested(1)
        publisher.publish_round_reset(2)
        assert publisher.events == []
        assert client.published == []

    assert publisher.actions() == ['requested_raffle_winner', 'round_reset']
    assert [message['action'] for _, message in client.published] == ['requested_raffle_winner', 'round_reset']


def test_atomic_block_drops_events_on_error():
    publisher = RaffleEventPublisher(client=FakeRedis())
    publisher.publish_raffle_entered("alice")

    with pytest.raises(RuntimeError):
        with publisher.atomic():
            publisher.publish_winner_picked("alice", 10)
            raise RuntimeError("payout failed")

    assert publisher.actions() == ['raffle_entered']

    # The publisher keeps working after a dropped block
    publisher.publish_round_reopened(3)
    assert publisher.actions() == ['raffle_entered', 'round_reopened']


def test_nested_atomic_joins_outer_block():
    publisher = RaffleEventPublisher()

    with pytest.raises(ValueError):
        with publisher.atomic():
            with publisher.atomic():
                publisher.publish_round_started()
            raise ValueError("outer failure")

    assert publisher.events == []


def test_unreachable_redis_url_disables_publisher(monkeypatch):
    def refuse(url, **kwargs):
        raise redis.ConnectionError("connection refused")

    monkeypatch.setattr(redis, "from_url", refuse)
    publisher = RaffleEventPublisher(redis_url="localhost:6379")

    assert publisher.enabled is False
    assert publisher.publish_round_started() is False
