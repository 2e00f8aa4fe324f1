"""
Raffle
The deployed raffle: state machine plus the randomness callback it exposes
to the coordinator
"""

import time

from utils.redis_publisher import RaffleEventPublisher

from .draw import RandomnessCallbackHandler
from .state_machine import RaffleStateMachine


class Raffle(RaffleStateMachine):
    """Single-winner raffle resolved by an external randomness service"""

    def __init__(self, config, coordinator, payments, authorizer=None, raffle_round=None,
                 publisher=None, history=None, clock=time.time):
        """
        Args:
            config: RaffleConfig
            coordinator: Randomness service the raffle requests words from
            payments: Payment rail used to pay winners
            authorizer: TrustedCaller for callbacks (defaults to the coordinator)
            raffle_round: Round to operate on (fresh if omitted)
            publisher: RaffleEventPublisher shared by both halves
            history: Optional RaffleHistory
            clock: Callable returning the current time in seconds
        """
        publisher = publisher or RaffleEventPublisher()
        super().__init__(
            config,
            coordinator,
            raffle_round=raffle_round,
            publisher=publisher,
            history=history,
            clock=clock,
        )
        self.fulfillment = RandomnessCallbackHandler(
            self.round,
            authorizer or coordinator,
            payments,
            publisher=publisher,
            history=history,
            clock=clock,
        )

    def resolve(self, caller, request_id, random_words):
        """Inbound callback from the randomness service"""
        return self.fulfillment.resolve(caller, request_id, random_words)

    def summary(self):
        """Every public query in one dict"""
        return {
            'state': self.get_raffle_state().name,
            'entrance_fee': str(self.get_entrance_fee()),
            'owner': self.get_owner(),
            'interval': self.get_interval(),
            'minimum_players': self.get_minimum_players(),
            'number_of_players': self.get_number_of_players(),
            'players': self.get_players(),
            'balance': str(self.get_balance()),
            'recent_winner': self.get_recent_winner(),
            'last_timestamp': self.get_last_timestamp(),
            'pending_request_id': self.get_pending_request_id(),
            'round_number': self.get_round_number(),
        }
