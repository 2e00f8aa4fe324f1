"""
Redis Publisher for Raffle Events
Keeps an ordered log of raffle notifications and publishes them to Redis
channels for dashboards and other log consumers
"""

import json
import logging
import os
from contextlib import contextmanager

import redis

logger = logging.getLogger(__name__)

CHANNEL = 'raffle:events'


class RaffleEventPublisher:
    def __init__(self, redis_url=None, client=None, channel=CHANNEL):
        self.channel = channel
        self.events = []
        self._buffer = None
        self.client = client
        self.enabled = client is not None

        if self.client is None:
            redis_url = redis_url or os.getenv('REDIS_URL')
            if redis_url:
                if '://' not in redis_url:
                    redis_url = f'redis://{redis_url}'
                try:
                    self.client = redis.from_url(redis_url, decode_responses=True)
                    self.client.ping()
                    self.enabled = True
                    logger.info("✅ Raffle Redis publisher connected")
                except redis.RedisError as e:
                    logger.warning(f"⚠️ Redis unavailable for raffle publisher: {e}")
                    self.enabled = False
            else:
                logger.debug("REDIS_URL not set, raffle events stay in-process")

    def publish(self, action, data=None):
        """Record an event; inside atomic() it is held until the block commits"""
        event = {'action': action, 'data': data or {}}
        if self._buffer is not None:
            self._buffer.append(event)
            return True
        return self._emit(event)

    @contextmanager
    def atomic(self):
        """
        Buffer every event published inside the block

        Events are emitted in order when the block exits cleanly and dropped
        if it raises. Nested blocks join the outermost buffer.
        """
        if self._buffer is not None:
            yield
            return

        self._buffer = []
        try:
            yield
        except BaseException:
            dropped = len(self._buffer)
            self._buffer = None
            if dropped:
                logger.debug(f"Discarded {dropped} buffered raffle event(s)")
            raise
        buffered, self._buffer = self._buffer, None
        for event in buffered:
            self._emit(event)

    def _emit(self, event):
        self.events.append(event)
        if not self.enabled:
            return False

        try:
            self.client.publish(self.channel, json.dumps(event))
            logger.debug(f"📤 Published to {self.channel}: {event['action']}")
            return True
        except redis.RedisError as e:
            logger.error(f"❌ Failed to publish to {self.channel}: {e}")
            return False

    def actions(self):
        """Names of every emitted event, oldest first"""
        return [event['action'] for event in self.events]

    def publish_raffle_entered(self, player):
        return self.publish('raffle_entered', {'player': player})

    def publish_winner_requested(self, request_id):
        return self.publish('requested_raffle_winner', {'request_id': request_id})

    def publish_winner_picked(self, winner, prize):
        # Prize as a string so 256-bit amounts survive JSON consumers
        return self.publish('winner_picked', {'winner': winner, 'prize': str(prize)})

    def publish_round_reset(self, participant_count):
        return self.publish('round_reset', {'participant_count': participant_count})

    def publish_round_started(self):
        return self.publish('round_started')

    def publish_round_reopened(self, request_id):
        return self.publish('round_reopened', {'request_id': request_id})
