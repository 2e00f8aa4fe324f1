"""
Raffle Configuration
All configurable parameters for the raffle and its randomness requests
"""

import os
from dataclasses import dataclass

# Entry (amounts in wei)
ENTRANCE_FEE = int(os.getenv("RAFFLE_ENTRANCE_FEE", str(10**16)))  # 0.01 ether
MINIMUM_PLAYERS = 3                  # Fixed, not configurable per deployment

# Round timing (in seconds)
RAFFLE_INTERVAL = int(os.getenv("RAFFLE_INTERVAL", "30"))
REQUEST_TIMEOUT = int(os.getenv("RAFFLE_REQUEST_TIMEOUT", "3600"))  # force_reopen grace period

# Administration
RAFFLE_OWNER = os.getenv("RAFFLE_OWNER", "owner")
RAFFLE_ID = os.getenv("RAFFLE_ID", "default")  # Keys the audit history of one deployment

# Randomness requests
KEY_HASH = os.getenv(
    "VRF_KEY_HASH",
    "0x787d74caea10b2b357790d5b5247c2f63d1d91572a9846f780606e4d953677ae",
)
SUBSCRIPTION_ID = int(os.getenv("VRF_SUBSCRIPTION_ID", "0"))
REQUEST_CONFIRMATIONS = int(os.getenv("VRF_REQUEST_CONFIRMATIONS", "3"))
CALLBACK_GAS_LIMIT = int(os.getenv("VRF_CALLBACK_GAS_LIMIT", "500000"))
NUM_WORDS = 1                        # One random value decides one winner

# Upkeep polling (in seconds)
UPKEEP_CHECK_INTERVAL = int(os.getenv("UPKEEP_CHECK_INTERVAL", "10"))

# Infrastructure
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///raffle.db")
CHAIN_ID = int(os.getenv("CHAIN_ID", "31337"))
API_PORT = int(os.getenv("PORT", "8000"))


@dataclass(frozen=True)
class RaffleConfig:
    """Settings fixed for the lifetime of a raffle instance"""
    entrance_fee: int
    interval: int
    owner: str
    key_hash: str = KEY_HASH
    subscription_id: int = SUBSCRIPTION_ID
    request_confirmations: int = REQUEST_CONFIRMATIONS
    callback_gas_limit: int = CALLBACK_GAS_LIMIT
    request_timeout: int = REQUEST_TIMEOUT
    minimum_players: int = MINIMUM_PLAYERS
    num_words: int = NUM_WORDS

    def __post_init__(self):
        """Validate configuration"""
        if self.entrance_fee <= 0:
            raise ValueError("entrance_fee must be positive")
        if self.interval < 0:
            raise ValueError("interval cannot be negative")
        if not self.owner:
            raise ValueError("owner cannot be empty")
        if self.minimum_players != MINIMUM_PLAYERS:
            raise ValueError(f"minimum_players is fixed at {MINIMUM_PLAYERS}")
        if self.num_words != NUM_WORDS:
            raise ValueError(f"num_words is fixed at {NUM_WORDS}")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")


def load_raffle_config(**overrides):
    """
    Build a RaffleConfig from the environment-backed defaults above

    Args:
        **overrides: Field values that take precedence over the environment

    Returns:
        RaffleConfig: Validated configuration
    """
    values = {
        'entrance_fee': ENTRANCE_FEE,
        'interval': RAFFLE_INTERVAL,
        'owner': RAFFLE_OWNER,
    }
    values.update(overrides)
    return RaffleConfig(**values)
