"""
Raffle Deployment
Brings up a raffle for a network: coordinator, subscription, consumer registration
"""

import logging
import time

from .coordinator import MockRandomnessCoordinator
from .network_config import get_network_config
from .raffle import Raffle

logger = logging.getLogger(__name__)

# 3 LINK funds a fresh local subscription for a dozen draws
FUND_AMOUNT = 3 * 10**18


def create_subscription(coordinator, owner):
    subscription_id = coordinator.create_subscription(owner)
    logger.info(f"Your subscription id is {subscription_id}")
    return subscription_id


def fund_subscription(coordinator, subscription_id, amount=FUND_AMOUNT):
    return coordinator.fund_subscription(subscription_id, amount)


def add_consumer(coordinator, subscription_id, raffle):
    coordinator.add_consumer(subscription_id, raffle)
    logger.info(f"🔗 Raffle registered as consumer on subscription #{subscription_id}")


def deploy_raffle(chain_id=None, network=None, coordinator=None, payments=None, publisher=None,
                  history=None, clock=time.time, fund_amount=FUND_AMOUNT):
    """
    Deploy a raffle on a network

    A local network gets an in-process coordinator. When the network has no
    subscription yet, one is created and funded before the raffle is built.

    Args:
        chain_id: Chain to deploy on (ignored when `network` is given)
        network: NetworkConfig to deploy with
        coordinator: Randomness coordinator; required on non-local networks
        payments: Payment rail for winner payouts
        publisher: RaffleEventPublisher
        history: Optional RaffleHistory
        clock: Callable returning the current time in seconds
        fund_amount: Amount used to fund a newly created subscription

    Returns:
        tuple: (raffle, coordinator, network)
    """
    if network is None:
        network = get_network_config(chain_id)

    if payments is None:
        raise ValueError("A payment rail is required to deploy a raffle")

    subscription_id = network.subscription_id

    if coordinator is None:
        if not network.is_local:
            raise ValueError(f"A coordinator client for {network.coordinator_address} is required on {network.name}")
        coordinator = MockRandomnessCoordinator()
        logger.info(f"🧪 Started local randomness coordinator at {coordinator.address}")
        if subscription_id != 0:
            # A fresh coordinator has no subscriptions yet
            logger.warning(f"⚠️ Subscription #{subscription_id} does not exist on the new local coordinator, creating one")
            subscription_id = 0
    elif subscription_id != 0:
        # Raises InvalidSubscription before anything is deployed
        coordinator.get_subscription(subscription_id)

    if subscription_id == 0:
        subscription_id = create_subscription(coordinator, network.owner)
        fund_subscription(coordinator, subscription_id, fund_amount)

    raffle = Raffle(
        network.raffle_config(subscription_id=subscription_id),
        coordinator,
        payments,
        publisher=publisher,
        history=history,
        clock=clock,
    )

    add_consumer(coordinator, subscription_id, raffle)
    logger.info(f"✅ Raffle deployed on {network.name} (entrance fee: {network.entrance_fee}, interval: {network.interval}s)")
    return raffle, coordinator, network
