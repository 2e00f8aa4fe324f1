"""
Raffle Round State
The mutable unit shared by the state machine and the randomness callback handler
"""

import enum
from dataclasses import dataclass, field
from typing import List, Optional, Set


class RaffleState(enum.IntEnum):
    OPEN = 0
    CALCULATING = 1
    CLOSED = 2


@dataclass
class Round:
    """
    Round state for one raffle instance

    `participants` is the draw index space (entry order) and `has_entered`
    is its O(1) membership mirror. Only admit() and clear_participants()
    touch either of them, so the two never drift apart.
    """
    last_resolution_time: int
    state: RaffleState = RaffleState.OPEN
    participants: List[str] = field(default_factory=list)
    has_entered: Set[str] = field(default_factory=set)
    pool_balance: int = 0
    recent_winner: Optional[str] = None
    pending_request_id: Optional[int] = None
    requested_at: Optional[int] = None
    round_number: int = 1

    def admit(self, player, amount):
        self.participants.append(player)
        self.has_entered.add(player)
        self.pool_balance += amount

    def clear_participants(self):
        """Empty the participant list and its membership set, returns how many were removed"""
        count = len(self.participants)
        for player in self.participants:
            self.has_entered.discard(player)
        self.participants.clear()
        return count

    def begin_request(self, request_id, requested_at):
        self.state = RaffleState.CALCULATING
        self.pending_request_id = request_id
        self.requested_at = requested_at

    def end_request(self):
        self.state = RaffleState.OPEN
        self.pending_request_id = None
        self.requested_at = None

    def snapshot(self):
        return Round(
            last_resolution_time=self.last_resolution_time,
            state=self.state,
            participants=list(self.participants),
            has_entered=set(self.has_entered),
            pool_balance=self.pool_balance,
            recent_winner=self.recent_winner,
            pending_request_id=self.pending_request_id,
            requested_at=self.requested_at,
            round_number=self.round_number,
        )

    def restore(self, snapshot):
        """Put every field back to the values held by `snapshot`, in place"""
        self.last_resolution_time = snapshot.last_resolution_time
        self.state = snapshot.state
        self.participants[:] = snapshot.participants
        self.has_entered.clear()
        self.has_entered.update(snapshot.has_entered)
        self.pool_balance = snapshot.pool_balance
        self.recent_winner = snapshot.recent_winner
        self.pending_request_id = snapshot.pending_request_id
        self.requested_at = snapshot.requested_at
        self.round_number = snapshot.round_number
