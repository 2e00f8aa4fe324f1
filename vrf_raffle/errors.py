"""
Raffle Errors
Every rejected raffle operation raises one of these, carrying the values
that caused the rejection so callers can diagnose without extra queries.
"""


class RaffleError(Exception):
    """Base class for all raffle errors"""


# ============================================
# ADMISSION
# ============================================

class AdmissionError(RaffleError):
    """Entry was refused; nothing about the round changed"""


class InsufficientPayment(AdmissionError):
    def __init__(self, amount, entrance_fee):
        self.amount = amount
        self.entrance_fee = entrance_fee
        super().__init__(f"Sent {amount}, entrance fee is {entrance_fee}")


class RoundNotOpen(AdmissionError):
    def __init__(self, state):
        self.state = state
        super().__init__(f"Raffle is not open (state: {state.name})")


class DuplicateEntry(AdmissionError):
    def __init__(self, player):
        self.player = player
        super().__init__(f"{player} already entered this round")


class DirectPaymentRejected(AdmissionError):
    def __init__(self, sender, amount):
        self.sender = sender
        self.amount = amount
        super().__init__(f"Direct payment of {amount} from {sender} refused, use enter()")


# ============================================
# AUTHORIZATION
# ============================================

class AuthorizationError(RaffleError):
    """Caller is not allowed to perform the operation"""


class NotOwner(AuthorizationError):
    def __init__(self, caller):
        self.caller = caller
        super().__init__(f"{caller} is not the raffle owner")


class OnlyCoordinatorCanFulfill(AuthorizationError):
    def __init__(self, caller):
        self.caller = caller
        super().__init__(f"{caller} is not the randomness coordinator")


# ============================================
# PROTOCOL STATE
# ============================================

class ProtocolStateError(RaffleError):
    """Operation does not apply to the round's current state"""


class ExecutionNotNeeded(ProtocolStateError):
    def __init__(self, balance, players, state):
        self.balance = balance
        self.players = players
        self.state = state
        super().__init__(
            f"Upkeep not needed (balance: {balance}, players: {players}, state: {state.name})"
        )


class AlreadyOpen(ProtocolStateError):
    def __init__(self, state):
        self.state = state
        super().__init__(f"Round can only be started from CLOSED (state: {state.name})")


class StaleRandomnessRequest(ProtocolStateError):
    def __init__(self, request_id, pending_request_id):
        self.request_id = request_id
        self.pending_request_id = pending_request_id
        super().__init__(
            f"Request {request_id} does not match the pending request ({pending_request_id})"
        )


class RoundHasNoParticipants(ProtocolStateError):
    def __init__(self, request_id):
        self.request_id = request_id
        super().__init__(f"Request {request_id} arrived for a round with no participants")


class RoundNotCalculating(ProtocolStateError):
    def __init__(self, state):
        self.state = state
        super().__init__(f"No randomness request is outstanding (state: {state.name})")


class RequestNotTimedOut(ProtocolStateError):
    def __init__(self, requested_at, timeout, now):
        self.requested_at = requested_at
        self.timeout = timeout
        self.now = now
        super().__init__(
            f"Request made at {requested_at} has not exceeded the {timeout}s timeout (now: {now})"
        )


# ============================================
# EXTERNAL CALLS
# ============================================

class TransferFailed(RaffleError):
    def __init__(self, winner, amount):
        self.winner = winner
        self.amount = amount
        super().__init__(f"Failed to pay {amount} to {winner}")
