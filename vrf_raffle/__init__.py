"""
VRF Raffle Package
Single-winner raffle resolved by an external verifiable randomness service
"""

__version__ = "1.0.0"

# Export main components
from .config import RaffleConfig, load_raffle_config
from .coordinator import MockRandomnessCoordinator
from .deploy import deploy_raffle
from .draw import RandomnessCallbackHandler
from .raffle import Raffle
from .round import RaffleState, Round
from .scheduler import UpkeepScheduler, setup_upkeep_scheduler
from .state_machine import RaffleStateMachine

__all__ = [
    'RaffleConfig',
    'load_raffle_config',
    'MockRandomnessCoordinator',
    'deploy_raffle',
    'RandomnessCallbackHandler',
    'Raffle',
    'RaffleState',
    'Round',
    'UpkeepScheduler',
    'setup_upkeep_scheduler',
    'RaffleStateMachine',
]
