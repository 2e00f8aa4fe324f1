"""
Raffle State Machine
Entry admission, upkeep readiness, randomness requests and administrative
round control
"""

import logging
import time

from utils.logging_config import log_round_transition
from utils.redis_publisher import RaffleEventPublisher

from .errors import (
    AlreadyOpen,
    DirectPaymentRejected,
    DuplicateEntry,
    ExecutionNotNeeded,
    InsufficientPayment,
    NotOwner,
    RequestNotTimedOut,
    RoundNotCalculating,
    RoundNotOpen,
)
from .round import RaffleState, Round

logger = logging.getLogger(__name__)


class RaffleStateMachine:
    """Owns the round lifecycle up to the randomness request"""

    def __init__(self, config, coordinator, raffle_round=None, publisher=None, history=None, clock=time.time):
        """
        Initialize the state machine

        Args:
            config: RaffleConfig for this raffle
            coordinator: Randomness service accepting request_random_words()
            raffle_round: Round to operate on (a fresh OPEN round if omitted)
            publisher: RaffleEventPublisher for notifications
            history: Optional RaffleHistory for the entry audit trail
            clock: Callable returning the current time in seconds
        """
        self.config = config
        self.coordinator = coordinator
        self.clock = clock
        self.publisher = publisher or RaffleEventPublisher()
        self.history = history
        if raffle_round is None:
            raffle_round = self._new_round()
        self.round = raffle_round

    def _new_round(self):
        round_number = 1
        if self.history is not None:
            # Continue after rounds a previous process already recorded
            round_number = self.history.next_round_number()
            if round_number > 1:
                logger.info(f"📜 Resuming raffle history at round #{round_number}")
        return Round(last_resolution_time=self.now(), round_number=round_number)

    def now(self):
        return int(self.clock())

    # ============================================
    # PLAYER OPERATIONS
    # ============================================

    def enter(self, player, amount):
        """
        Admit a player to the current round

        Args:
            player: Participant identifier
            amount: Payment sent with the entry
        """
        if amount < self.config.entrance_fee:
            raise InsufficientPayment(amount, self.config.entrance_fee)
        if self.round.state != RaffleState.OPEN:
            raise RoundNotOpen(self.round.state)
        if player in self.round.has_entered:
            raise DuplicateEntry(player)

        self.round.admit(player, amount)
        self.publisher.publish_raffle_entered(player)
        logger.info(f"🎟️ {player} entered round #{self.round.round_number} (pool: {self.round.pool_balance})")

        if self.history is not None:
            self.history.record_entry(self.round.round_number, player, amount)

    def reject_direct_payment(self, sender, amount):
        """Value sent outside enter() is always refused"""
        raise DirectPaymentRejected(sender, amount)

    # ============================================
    # UPKEEP
    # ============================================

    def is_ready(self, check_data=b""):
        """
        Check whether a winner should be requested

        Returns:
            tuple: (upkeep_needed, perform_data)
        """
        is_open = self.round.state == RaffleState.OPEN
        time_passed = (self.now() - self.round.last_resolution_time) > self.config.interval
        has_players = len(self.round.participants) >= self.config.minimum_players
        has_balance = self.round.pool_balance > 0
        return (is_open and time_passed and has_players and has_balance), b""

    def execute(self, perform_data=b""):
        """
        Request randomness for the current round

        Readiness is recomputed here, perform_data is never trusted.

        Returns:
            int: Request id of the outstanding randomness request
        """
        upkeep_needed, _ = self.is_ready()
        if not upkeep_needed:
            raise ExecutionNotNeeded(
                self.round.pool_balance, len(self.round.participants), self.round.state
            )

        snapshot = self.round.snapshot()
        try:
            with self.publisher.atomic():
                self.round.state = RaffleState.CALCULATING
                request_id = self.coordinator.request_random_words(
                    key_hash=self.config.key_hash,
                    subscription_id=self.config.subscription_id,
                    request_confirmations=self.config.request_confirmations,
                    callback_gas_limit=self.config.callback_gas_limit,
                    num_words=self.config.num_words,
                    consumer=self,
                )
                self.round.begin_request(request_id, self.now())
                self.publisher.publish_winner_requested(request_id)
        except Exception:
            self.round.restore(snapshot)
            raise

        log_round_transition(logger, self.round.round_number, RaffleState.OPEN, RaffleState.CALCULATING, f"request #{request_id}")
        return request_id

    # ============================================
    # ADMINISTRATION
    # ============================================

    def _require_owner(self, caller):
        if caller != self.config.owner:
            raise NotOwner(caller)

    def reset_round(self, caller):
        """Drop every participant of the current round, state and pool are left as they are"""
        self._require_owner(caller)
        count = self.round.clear_participants()
        self.publisher.publish_round_reset(count)
        if self.history is not None:
            self.history.record_reset(self.round.round_number)
        logger.warning(f"⚠️ Round #{self.round.round_number} reset by {caller} ({count} participants removed)")

    def start_round(self, caller):
        self._require_owner(caller)
        if self.round.state != RaffleState.CLOSED:
            raise AlreadyOpen(self.round.state)
        self.round.state = RaffleState.OPEN
        self.publisher.publish_round_started()
        log_round_transition(logger, self.round.round_number, RaffleState.CLOSED, RaffleState.OPEN, f"started by {caller}")

    def force_reopen(self, caller):
        """
        Abandon a randomness request that was never answered

        Participants and pool stay in place so the round can be drawn again;
        a late delivery for the abandoned request is rejected as stale.
        """
        self._require_owner(caller)
        if self.round.state != RaffleState.CALCULATING:
            raise RoundNotCalculating(self.round.state)

        now = self.now()
        if now - self.round.requested_at < self.config.request_timeout:
            raise RequestNotTimedOut(self.round.requested_at, self.config.request_timeout, now)

        request_id = self.round.pending_request_id
        self.round.end_request()
        self.publisher.publish_round_reopened(request_id)
        logger.warning(f"⚠️ Request #{request_id} abandoned by {caller}, round #{self.round.round_number} reopened")

    # ============================================
    # QUERIES
    # ============================================

    def get_entrance_fee(self):
        return self.config.entrance_fee

    def get_raffle_state(self):
        return self.round.state

    def get_owner(self):
        return self.config.owner

    def get_interval(self):
        return self.config.interval

    def get_number_of_players(self):
        return len(self.round.participants)

    def get_player(self, index):
        if index < 0:
            raise IndexError(f"Player index {index} out of range")
        return self.round.participants[index]

    def get_players(self):
        return list(self.round.participants)

    def get_recent_winner(self):
        return self.round.recent_winner

    def get_last_timestamp(self):
        return self.round.last_resolution_time

    def has_entered(self, player):
        return player in self.round.has_entered

    def get_minimum_players(self):
        return self.config.minimum_players

    def get_balance(self):
        return self.round.pool_balance

    def get_pending_request_id(self):
        return self.round.pending_request_id

    def get_round_number(self):
        return self.round.round_number
