"""
Test Raffle History
Tests the entry and draw audit trail
"""

from sqlalchemy import text

from conftest import ENTRANCE_FEE, INTERVAL, OWNER, PLAYERS, RecordingRail
from vrf_raffle.history import RaffleHistory
from vrf_raffle.raffle import Raffle


def test_record_and_read_entries(history):
    assert history.record_entry(1, "alice", ENTRANCE_FEE)
    assert history.record_entry(1, "bob", ENTRANCE_FEE + 3)
    assert history.record_entry(2, "alice", ENTRANCE_FEE)

    entries = history.get_round_entries(1)

    assert [(e['player'], e['amount']) for e in entries] == [("alice", ENTRANCE_FEE), ("bob", ENTRANCE_FEE + 3)]
    assert [e['player'] for e in history.get_round_entries(2)] == ["alice"]
    assert history.get_round_entries(3) == []


def test_record_reset_hides_removed_entries(history):
    history.record_entry(1, "alice", ENTRANCE_FEE)
    history.record_entry(1, "bob", ENTRANCE_FEE)

    assert history.record_reset(1)
    history.record_entry(1, "carol", ENTRANCE_FEE)

    assert [e["player"] for e in history.get_round_entries(1)] == ["carol"]
    removed = [e for e in history.get_round_entries(1, include_reset=True) if e["reset_at"] is not None]
    assert [e["player"] for e in removed] == ["alice", "bob"]


def test_draw_history_newest_first(history):
    for round_number in (1, 2, 3):
        assert history.record_draw(
            round_number=round_number,
            request_id=round_number * 10,
            winner=f"player{round_number}",
            prize=round_number * 100,
            winner_index=0,
            total_participants=3,
            random_word=2**255 + round_number,
        )

    draws = history.get_draw_history(limit=2)

    assert [d['round_number'] for d in draws] == [3, 2]
    assert draws[0]['prize'] == 300
    assert draws[0]['random_word'] == 2**255 + 3
    assert draws[0]['request_id'] == 30


def test_duplicate_draw_record_returns_false(history):
    draw = dict(round_number=1, request_id=1, winner="alice", prize=30,
                winner_index=0, total_participants=3, random_word=6)

    assert history.record_draw(**draw)
    assert history.record_draw(**draw) is False
    assert len(history.get_draw_history()) == 1


def test_raffle_entries_are_recorded(raffle, history):
    raffle.enter("alice", ENTRANCE_FEE)
    raffle.enter("bob", ENTRANCE_FEE * 2)

    entries = history.get_round_entries(raffle.get_round_number())

    assert [(e['player'], e['amount']) for e in entries] == [("alice", ENTRANCE_FEE), ("bob", ENTRANCE_FEE * 2)]


def test_history_failure_does_not_block_entry(raffle, history, engine):
    """A broken audit table is logged, the entry itself still counts"""
    with engine.begin() as conn:
        conn.execute(text("DROP TABLE raffle_entries"))

    raffle.enter("alice", ENTRANCE_FEE)

    assert raffle.get_players() == ["alice"]
    assert history.get_round_entries(1) == []


def test_reentry_after_reset_is_recorded(raffle, history):
    """A player removed by an owner reset can enter again and both entries are kept"""
    raffle.enter("alice", ENTRANCE_FEE)
    raffle.reset_round(OWNER)
    raffle.enter("alice", ENTRANCE_FEE + 5)

    live = history.get_round_entries(1)
    everything = history.get_round_entries(1, include_reset=True)

    assert [(e['player'], e['amount']) for e in live] == [("alice", ENTRANCE_FEE + 5)]
    assert [(e['player'], e['amount']) for e in everything] == [("alice", ENTRANCE_FEE), ("alice", ENTRANCE_FEE + 5)]


def test_next_round_number_on_empty_history(history):
    assert history.next_round_number() == 1


def test_next_round_number_counts_entries_and_draws(history):
    history.record_draw(round_number=1, request_id=1, winner="alice", prize=30,
                        winner_index=0, total_participants=3, random_word=6)
    assert history.next_round_number() == 2

    # An unresolved round left behind by a stopped process
    history.record_entry(2, "bob", ENTRANCE_FEE)
    assert history.next_round_number() == 3


def test_restarted_raffle_keeps_recording_draws(raffle_config, coordinator, subscription_id, engine, clock):
    """A second raffle process on the same database continues the round numbering"""
    draws = 0
    for _ in range(2):
        raffle = Raffle(raffle_config, coordinator, RecordingRail(), history=RaffleHistory(engine), clock=clock)
        coordinator.add_consumer(subscription_id, raffle)
        for player in PLAYERS[:3]:
            raffle.enter(player, ENTRANCE_FEE)
        clock.advance(INTERVAL + 1)
        coordinator.fulfill_random_words(raffle.execute(), [7])
        draws += 1

    history = RaffleHistory(engine).get_draw_history()

    assert [d['round_number'] for d in history] == [2, 1]
    assert len(history) == draws
    assert [e['player'] for e in RaffleHistory(engine).get_round_entries(2)] == PLAYERS[:3]


def test_raffle_ids_keep_separate_histories(engine):
    main = RaffleHistory(engine, raffle_id="main")
    side = RaffleHistory(engine, raffle_id="side")
    draw = dict(round_number=1, request_id=1, winner="alice", prize=30,
                winner_index=0, total_participants=3, random_word=6)

    assert main.record_draw(**draw)
    assert side.record_draw(**draw)

    assert len(main.get_draw_history()) == 1
    assert len(side.get_draw_history()) == 1
    assert side.next_round_number() == 2
