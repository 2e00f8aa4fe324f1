"""
Shared fixtures for raffle tests
SQLite database per test, a controllable clock and a local coordinator
"""

import pytest
from sqlalchemy import create_engine

from utils.redis_publisher import RaffleEventPublisher
from vrf_raffle.config import RaffleConfig
from vrf_raffle.coordinator import MockRandomnessCoordinator
from vrf_raffle.database import setup_raffle_database
from vrf_raffle.history import RaffleHistory
from vrf_raffle.ledger import AccountLedger
from vrf_raffle.raffle import Raffle

OWNER = "owner"
ENTRANCE_FEE = 10
INTERVAL = 30
REQUEST_TIMEOUT = 600
START_TIME = 1_700_000_000
PLAYERS = ["alice", "bob", "charlie", "dave", "erin"]


class FakeClock:
    def __init__(self, now=START_TIME):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class RecordingRail:
    """In-memory payment rail"""

    def __init__(self):
        self.balances = {}
        self.credits = []

    def credit(self, account, amount):
        self.balances[account] = self.balances.get(account, 0) + amount
        self.credits.append((account, amount))


@pytest.fixture(autouse=True)
def no_redis(monkeypatch):
    monkeypatch.delenv("REDIS_URL", raising=False)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'raffle.db'}")
    assert setup_raffle_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def ledger(engine):
    return AccountLedger(engine)


@pytest.fixture
def history(engine):
    return RaffleHistory(engine)


@pytest.fixture
def publisher():
    return RaffleEventPublisher()


@pytest.fixture
def coordinator():
    return MockRandomnessCoordinator(server_seed="test-seed")


@pytest.fixture
def subscription_id(coordinator):
    subscription_id = coordinator.create_subscription(OWNER)
    coordinator.fund_subscription(subscription_id, 10**19)
    return subscription_id


@pytest.fixture
def raffle_config(subscription_id):
    return RaffleConfig(
        entrance_fee=ENTRANCE_FEE,
        interval=INTERVAL,
        owner=OWNER,
        subscription_id=subscription_id,
        request_timeout=REQUEST_TIMEOUT,
    )


@pytest.fixture
def raffle(raffle_config, coordinator, subscription_id, ledger, publisher, history, clock):
    raffle = Raffle(
        raffle_config,
        coordinator,
        ledger,
        publisher=publisher,
        history=history,
        clock=clock,
    )
    coordinator.add_consumer(subscription_id, raffle)
    return raffle


@pytest.fixture
def ready_raffle(raffle, clock):
    """Three paid entries and the interval elapsed"""
    for player in PLAYERS[:3]:
        raffle.enter(player, ENTRANCE_FEE)
    clock.advance(INTERVAL + 1)
    return raffle
