"""
Randomness Coordinator
Contract of the external randomness service, and an in-process coordinator
used for local networks and tests
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

from utils.provably_fair import derive_random_words, generate_server_seed

from .errors import RoundHasNoParticipants, StaleRandomnessRequest

logger = logging.getLogger(__name__)

MAX_NUM_WORDS = 500
MAX_REQUEST_CONFIRMATIONS = 200
BASE_FEE = 25 * 10**16               # 0.25 LINK charged per fulfillment
MOCK_COORDINATOR_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


class CoordinatorError(Exception):
    """Base class for coordinator errors"""


class InvalidSubscription(CoordinatorError):
    pass


class InvalidConsumer(CoordinatorError):
    pass


class InvalidRequest(CoordinatorError):
    pass


class InsufficientBalance(CoordinatorError):
    pass


class NumWordsTooBig(CoordinatorError):
    pass


class TrustedCaller(Protocol):
    """Decides whether a callback really comes from the randomness service"""

    def is_trusted_caller(self, caller) -> bool:
        ...


class CoordinatorIdentity:
    """TrustedCaller for a coordinator known only by its address"""

    def __init__(self, address):
        self.address = address

    def is_trusted_caller(self, caller):
        return caller == self.address


@dataclass
class Subscription:
    owner: str
    balance: int = 0
    consumers: List[object] = field(default_factory=list)
    request_count: int = 0


@dataclass
class PendingRequest:
    request_id: int
    subscription_id: int
    consumer: object
    num_words: int
    key_hash: str
    request_confirmations: int
    callback_gas_limit: int


class MockRandomnessCoordinator:
    """
    Local randomness coordinator

    Requests are held until fulfill_random_words() is called, which calls
    the consumer's resolve(caller, request_id, random_words). A request
    whose callback raises stays pending so the delivery can be retried,
    unless the consumer rejected it as stale or as having nobody to draw.
    """

    def __init__(self, address=MOCK_COORDINATOR_ADDRESS, base_fee=BASE_FEE, server_seed=None):
        self.address = address
        self.base_fee = base_fee
        self.server_seed = server_seed or generate_server_seed()
        self.subscriptions: Dict[int, Subscription] = {}
        self._requests: Dict[int, PendingRequest] = {}
        self._next_subscription_id = 1
        self._next_request_id = 1
        self.last_request_id: Optional[int] = None
        self.proofs: Dict[int, str] = {}

    def is_trusted_caller(self, caller):
        return caller == self.address

    # ============================================
    # SUBSCRIPTIONS
    # ============================================

    def create_subscription(self, owner):
        subscription_id = self._next_subscription_id
        self._next_subscription_id += 1
        self.subscriptions[subscription_id] = Subscription(owner=owner)
        logger.info(f"📝 Created subscription #{subscription_id} for {owner}")
        return subscription_id

    def fund_subscription(self, subscription_id, amount):
        if amount <= 0:
            raise ValueError("Funding amount must be positive")
        subscription = self.get_subscription(subscription_id)
        subscription.balance += amount
        logger.info(f"💰 Funded subscription #{subscription_id} with {amount} (balance: {subscription.balance})")
        return subscription.balance

    def add_consumer(self, subscription_id, consumer):
        subscription = self.get_subscription(subscription_id)
        if not self._is_consumer(subscription, consumer):
            subscription.consumers.append(consumer)
            logger.info(f"🔗 Added consumer to subscription #{subscription_id}")

    def remove_consumer(self, subscription_id, consumer):
        subscription = self.get_subscription(subscription_id)
        if not self._is_consumer(subscription, consumer):
            raise InvalidConsumer(f"Consumer is not registered on subscription #{subscription_id}")
        subscription.consumers = [c for c in subscription.consumers if c is not consumer]

    def get_subscription(self, subscription_id):
        subscription = self.subscriptions.get(subscription_id)
        if subscription is None:
            raise InvalidSubscription(f"Subscription #{subscription_id} does not exist")
        return subscription

    @staticmethod
    def _is_consumer(subscription, consumer):
        return any(c is consumer for c in subscription.consumers)

    # ============================================
    # REQUESTS
    # ============================================

    def request_random_words(self, key_hash, subscription_id, request_confirmations,
                             callback_gas_limit, num_words, consumer):
        """
        Register a randomness request

        Returns:
            int: Request id the delivery will be correlated with
        """
        subscription = self.get_subscription(subscription_id)
        if not self._is_consumer(subscription, consumer):
            raise InvalidConsumer(f"Consumer is not registered on subscription #{subscription_id}")
        if num_words <= 0:
            raise InvalidRequest("num_words must be positive")
        if num_words > MAX_NUM_WORDS:
            raise NumWordsTooBig(f"{num_words} words requested, max is {MAX_NUM_WORDS}")
        if not 0 <= request_confirmations <= MAX_REQUEST_CONFIRMATIONS:
            raise InvalidRequest(f"request_confirmations must be within 0-{MAX_REQUEST_CONFIRMATIONS}")

        request_id = self._next_request_id
        self._next_request_id += 1
        subscription.request_count += 1

        self._requests[request_id] = PendingRequest(
            request_id=request_id,
            subscription_id=subscription_id,
            consumer=consumer,
            num_words=num_words,
            key_hash=key_hash,
            request_confirmations=request_confirmations,
            callback_gas_limit=callback_gas_limit,
        )
        self.last_request_id = request_id

        logger.info(f"🎲 Randomness request #{request_id} on subscription #{subscription_id}")
        return request_id

    def pending_requests(self):
        return sorted(self._requests)

    def fulfill_random_words(self, request_id, random_words=None):
        """
        Deliver random words for a pending request

        Args:
            request_id: Request to fulfill
            random_words: Explicit words; derived from the server seed when omitted

        Returns:
            list: The delivered words
        """
        request = self._requests.get(request_id)
        if request is None:
            raise InvalidRequest(f"Request #{request_id} is not pending")

        subscription = self.get_subscription(request.subscription_id)
        if subscription.balance < self.base_fee:
            raise InsufficientBalance(
                f"Subscription #{request.subscription_id} holds {subscription.balance}, fee is {self.base_fee}"
            )

        if random_words is None:
            random_words, proof_hash = derive_random_words(self.server_seed, request_id, request.num_words)
            self.proofs[request_id] = proof_hash
        else:
            random_words = list(random_words)
            if len(random_words) != request.num_words:
                raise InvalidRequest(
                    f"Request #{request_id} expects {request.num_words} words, got {len(random_words)}"
                )

        # A stale or empty-round rejection can never succeed later, so the request
        # is dropped; any other error leaves it pending for another delivery
        try:
            request.consumer.resolve(self.address, request_id, random_words)
        except (StaleRandomnessRequest, RoundHasNoParticipants):
            self._settle(request_id, subscription)
            logger.warning(f"⚠️ Request #{request_id} rejected by its consumer, dropped")
            raise

        self._settle(request_id, subscription)
        logger.info(f"✅ Fulfilled request #{request_id}")
        return random_words

    def _settle(self, request_id, subscription):
        del self._requests[request_id]
        subscription.balance -= self.base_fee

    def fulfill_pending(self):
        """Fulfill every pending request, returns the ids that were delivered"""
        fulfilled = []
        for request_id in self.pending_requests():
            self.fulfill_random_words(request_id)
            fulfilled.append(request_id)
        return fulfilled
