"""
Raffle Draw Logic
Resolves a round when the randomness service delivers its random words
"""

import logging
import time

from utils.redis_publisher import RaffleEventPublisher

from .errors import (
    OnlyCoordinatorCanFulfill,
    RoundHasNoParticipants,
    StaleRandomnessRequest,
    TransferFailed,
)
from .round import RaffleState

logger = logging.getLogger(__name__)


def select_winner_index(random_word, participant_count):
    """
    Map a random word onto the participant list

    Plain modulo. The bias is negligible for 256-bit words and realistic
    participant counts, and the mapping must stay stable for a given word.
    """
    if participant_count <= 0:
        raise ValueError("participant_count must be positive")
    return random_word % participant_count


class RandomnessCallbackHandler:
    """Picks the winner, pays out the pool and reopens the round"""

    def __init__(self, raffle_round, authorizer, payments, publisher=None, history=None, clock=time.time):
        """
        Initialize the handler

        Args:
            raffle_round: Round shared with the state machine
            authorizer: TrustedCaller identifying the randomness service
            payments: Payment rail exposing credit(account, amount)
            publisher: RaffleEventPublisher for notifications
            history: Optional RaffleHistory for the draw record
            clock: Callable returning the current time in seconds
        """
        self.round = raffle_round
        self.authorizer = authorizer
        self.payments = payments
        self.publisher = publisher or RaffleEventPublisher()
        self.history = history
        self.clock = clock

    def resolve(self, caller, request_id, random_words):
        """
        Resolve the round for a delivered randomness request

        Args:
            caller: Identity of whoever delivered the words
            request_id: Correlation id the words belong to
            random_words: Delivered random words, the first one decides

        Returns:
            dict: Draw result
        """
        if not self.authorizer.is_trusted_caller(caller):
            raise OnlyCoordinatorCanFulfill(caller)

        raffle_round = self.round
        if raffle_round.state != RaffleState.CALCULATING or request_id != raffle_round.pending_request_id:
            logger.warning(f"Ignoring delivery for request #{request_id} (pending: {raffle_round.pending_request_id})")
            raise StaleRandomnessRequest(request_id, raffle_round.pending_request_id)
        if not random_words:
            raise ValueError(f"Request #{request_id} delivered no random words")
        if not raffle_round.participants:
            raise RoundHasNoParticipants(request_id)

        participant_count = len(raffle_round.participants)
        winner_index = select_winner_index(random_words[0], participant_count)
        winner = raffle_round.participants[winner_index]
        prize = raffle_round.pool_balance
        round_number = raffle_round.round_number

        snapshot = raffle_round.snapshot()
        try:
            with self.publisher.atomic():
                raffle_round.recent_winner = winner
                raffle_round.clear_participants()
                raffle_round.pool_balance = 0
                raffle_round.end_request()
                raffle_round.last_resolution_time = int(self.clock())
                raffle_round.round_number += 1

                self.publisher.publish_winner_picked(winner, prize)

                try:
                    self.payments.credit(winner, prize)
                except Exception as e:
                    raise TransferFailed(winner, prize) from e
        except TransferFailed:
            raffle_round.restore(snapshot)
            logger.error(f"❌ Payout of {prize} to {winner} failed, round #{round_number} rolled back")
            raise

        logger.info(f"🎉 Winner of round #{round_number}: {winner}")
        logger.info(f"   Prize: {prize} ({participant_count} players, index {winner_index})")

        if self.history is not None:
            self.history.record_draw(
                round_number=round_number,
                request_id=request_id,
                winner=winner,
                prize=prize,
                winner_index=winner_index,
                total_participants=participant_count,
                random_word=random_words[0],
            )

        return {
            'round_number': round_number,
            'request_id': request_id,
            'winner': winner,
            'prize': prize,
            'winner_index': winner_index,
            'total_participants': participant_count,
        }
