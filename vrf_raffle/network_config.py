"""
Network Configuration
Per-chain raffle and randomness coordinator settings
"""

import os
from typing import Dict, Optional
from dataclasses import dataclass
import logging

from . import config

logger = logging.getLogger(__name__)

SEPOLIA_CHAIN_ID = 11155111
LOCAL_CHAIN_ID = 31337


class InvalidChainId(ValueError):
    pass


@dataclass
class NetworkConfig:
    """Configuration for a single network"""
    name: str
    entrance_fee: int
    interval: int
    key_hash: str
    callback_gas_limit: int
    subscription_id: int = 0
    coordinator_address: Optional[str] = None
    link_token_address: Optional[str] = None
    owner: str = config.RAFFLE_OWNER

    def __post_init__(self):
        """Validate configuration"""
        if not self.name:
            raise ValueError("name cannot be empty")
        if self.entrance_fee <= 0:
            raise ValueError("entrance_fee must be positive")
        if self.interval < 0:
            raise ValueError("interval cannot be negative")
        if not self.key_hash:
            raise ValueError("key_hash cannot be empty")
        if self.callback_gas_limit <= 0:
            raise ValueError("callback_gas_limit must be positive")

    @property
    def is_local(self):
        return self.coordinator_address is None

    def raffle_config(self, **overrides):
        """RaffleConfig for a raffle deployed on this network"""
        values = {
            'entrance_fee': self.entrance_fee,
            'interval': self.interval,
            'owner': self.owner,
            'key_hash': self.key_hash,
            'subscription_id': self.subscription_id,
            'callback_gas_limit': self.callback_gas_limit,
        }
        values.update(overrides)
        return config.load_raffle_config(**values)


def _sepolia_config():
    return NetworkConfig(
        name='sepolia',
        entrance_fee=10**16,  # 0.01 ether
        interval=30,
        key_hash='0x787d74caea10b2b357790d5b5247c2f63d1d91572a9846f780606e4d953677ae',
        callback_gas_limit=500000,
        subscription_id=int(os.getenv("SEPOLIA_SUBSCRIPTION_ID", str(config.SUBSCRIPTION_ID))),
        coordinator_address='0x9DdfaCa8183c41ad55329BdeeD9F6A8d53168B1B',
        link_token_address='0x779877A7B0D9E8603169DdbD7836e478b4624789',
        owner=os.getenv("SEPOLIA_OWNER", config.RAFFLE_OWNER),
    )


def _local_config():
    # No coordinator address: deploy_raffle() brings up an in-process coordinator
    return NetworkConfig(
        name='local',
        entrance_fee=config.ENTRANCE_FEE,
        interval=config.RAFFLE_INTERVAL,
        key_hash=config.KEY_HASH,
        callback_gas_limit=config.CALLBACK_GAS_LIMIT,
        subscription_id=config.SUBSCRIPTION_ID,
    )


NETWORK_CONFIGS = {
    SEPOLIA_CHAIN_ID: _sepolia_config,
    LOCAL_CHAIN_ID: _local_config,
}


def get_network_config(chain_id: int) -> NetworkConfig:
    """
    Look up the configuration for a chain

    Args:
        chain_id: Numeric chain id

    Returns:
        NetworkConfig: Settings for that chain
    """
    factory = NETWORK_CONFIGS.get(chain_id)
    if factory is None:
        raise InvalidChainId(f"No network configuration for chain id {chain_id}")

    network = factory()
    logger.info(f"✅ Loaded network config: {network.name} (chain id {chain_id})")
    return network


def supported_chain_ids() -> Dict[int, str]:
    return {chain_id: factory().name for chain_id, factory in NETWORK_CONFIGS.items()}
