"""
Test Upkeep Scheduler
Tests automatic winner requests and local fulfillment
"""

import asyncio

from conftest import ENTRANCE_FEE, INTERVAL, OWNER, PLAYERS, REQUEST_TIMEOUT, RecordingRail
from vrf_raffle.raffle import Raffle
from vrf_raffle.round import RaffleState
from vrf_raffle.scheduler import UpkeepScheduler, setup_upkeep_scheduler


def test_run_once_idle(raffle, coordinator):
    scheduler = UpkeepScheduler(raffle, local_coordinator=coordinator)

    outcome = scheduler.run_once()

    assert outcome == {'request_id': None, 'fulfilled': []}
    assert scheduler.checks == 1
    assert raffle.get_raffle_state() == RaffleState.OPEN


def test_run_once_requests_without_local_fulfillment(ready_raffle, coordinator):
    """Against a remote service the scheduler only requests, delivery comes later"""
    scheduler = UpkeepScheduler(ready_raffle)

    outcome = scheduler.run_once()

    assert outcome['request_id'] == coordinator.last_request_id
    assert outcome['fulfilled'] == []
    assert ready_raffle.get_raffle_state() == RaffleState.CALCULATING

    # Already calculating, nothing more to do
    assert scheduler.run_once() == {'request_id': None, 'fulfilled': []}


def test_run_once_full_round_locally(ready_raffle, coordinator, ledger):
    scheduler = UpkeepScheduler(ready_raffle, local_coordinator=coordinator)

    outcome = scheduler.run_once()

    assert outcome['fulfilled'] == [outcome['request_id']]
    assert ready_raffle.get_raffle_state() == RaffleState.OPEN
    assert ready_raffle.get_round_number() == 2
    winner = ready_raffle.get_recent_winner()
    assert winner in PLAYERS[:3]
    assert ledger.get_balance(winner) == 3 * ENTRANCE_FEE


def test_run_once_logs_failed_fulfillment(raffle_config, coordinator, subscription_id, clock):
    class BrokenRail(RecordingRail):
        def credit(self, account, amount):
            raise ConnectionError("rail down")

    raffle = Raffle(raffle_config, coordinator, BrokenRail(), clock=clock)
    coordinator.add_consumer(subscription_id, raffle)
    for player in PLAYERS[:3]:
        raffle.enter(player, ENTRANCE_FEE)
    clock.advance(INTERVAL + 1)
    scheduler = UpkeepScheduler(raffle, local_coordinator=coordinator)

    outcome = scheduler.run_once()

    assert outcome['fulfilled'] == []
    assert raffle.get_raffle_state() == RaffleState.CALCULATING
    assert coordinator.pending_requests() == [outcome['request_id']]


def test_upkeep_loop_runs_in_background(ready_raffle, coordinator):
    async def run():
        scheduler, loop = await setup_upkeep_scheduler(ready_raffle, local_coordinator=coordinator, seconds=0.01)
        try:
            for _ in range(100):
                if ready_raffle.get_round_number() == 2:
                    break
                await asyncio.sleep(0.01)
        finally:
            loop.cancel()
        return scheduler

    scheduler = asyncio.run(run())

    assert scheduler.checks >= 1
    assert ready_raffle.get_round_number() == 2
    assert ready_raffle.get_recent_winner() in PLAYERS[:3]


def test_abandoned_request_is_not_redelivered(ready_raffle, coordinator, clock, caplog):
    """After force_reopen the old request is dropped once, later checks stay quiet"""
    abandoned = ready_raffle.execute()
    clock.advance(REQUEST_TIMEOUT)
    ready_raffle.force_reopen(OWNER)
    scheduler = UpkeepScheduler(ready_raffle, local_coordinator=coordinator)

    first = scheduler.run_once()

    # The reopened round is still ready, so a fresh request is made and resolved
    assert first['request_id'] != abandoned
    assert first['fulfilled'] == [first['request_id']]
    assert coordinator.pending_requests() == []
    assert ready_raffle.get_round_number() == 2

    caplog.clear()
    for _ in range(3):
        assert scheduler.run_once() == {'request_id': None, 'fulfilled': []}

    assert coordinator.pending_requests() == []
    assert not [record for record in caplog.records if record.levelname == 'ERROR']
