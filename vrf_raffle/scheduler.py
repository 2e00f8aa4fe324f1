"""
Raffle Upkeep Scheduler
Plays the recurring trigger service: polls readiness and requests a winner when due
"""

import logging

from discord.ext import tasks

from .config import UPKEEP_CHECK_INTERVAL
from .coordinator import CoordinatorError
from .errors import ExecutionNotNeeded, RaffleError, RoundHasNoParticipants, StaleRandomnessRequest

logger = logging.getLogger(__name__)


class UpkeepScheduler:
    """Checks a raffle and performs upkeep when it is needed"""

    def __init__(self, raffle, local_coordinator=None):
        """
        Initialize upkeep scheduler

        Args:
            raffle: Raffle to watch
            local_coordinator: In-process coordinator whose pending requests
                are fulfilled on each check (local networks only)
        """
        self.raffle = raffle
        self.local_coordinator = local_coordinator
        self.checks = 0

        logger.info(f"📅 Upkeep scheduler initialized (local fulfillment: {local_coordinator is not None})")

    def run_once(self):
        """
        Run one upkeep check

        Returns:
            dict: What happened during the check
        """
        self.checks += 1
        outcome = {'request_id': None, 'fulfilled': []}

        upkeep_needed, perform_data = self.raffle.is_ready()
        if upkeep_needed:
            try:
                outcome['request_id'] = self.raffle.execute(perform_data)
            except ExecutionNotNeeded as e:
                # Readiness changed between the check and the execution
                logger.debug(f"Upkeep skipped: {e}")

        if self.local_coordinator is not None:
            outcome['fulfilled'] = self._fulfill_local()

        return outcome

    def _fulfill_local(self):
        fulfilled = []
        for request_id in self.local_coordinator.pending_requests():
            try:
                self.local_coordinator.fulfill_random_words(request_id)
                fulfilled.append(request_id)
            except (StaleRandomnessRequest, RoundHasNoParticipants) as e:
                logger.warning(f"Request #{request_id} dropped: {e}")
            except (RaffleError, CoordinatorError) as e:
                logger.error(f"Failed to fulfill request #{request_id}: {e}")
        return fulfilled


async def setup_upkeep_scheduler(raffle, local_coordinator=None, seconds=UPKEEP_CHECK_INTERVAL):
    """
    Start the upkeep check as a background task on the running event loop

    Args:
        raffle: Raffle to watch
        local_coordinator: Optional in-process coordinator to fulfill requests
        seconds: Interval between checks

    Returns:
        tuple: (UpkeepScheduler, started tasks.Loop)
    """
    scheduler = UpkeepScheduler(raffle, local_coordinator=local_coordinator)

    @tasks.loop(seconds=seconds)
    async def check_upkeep():
        try:
            outcome = scheduler.run_once()
            if outcome['request_id'] is not None:
                logger.info(f"🎲 Upkeep performed (request #{outcome['request_id']})")
        except Exception as e:
            logger.error(f"Error in upkeep check task: {e}", exc_info=True)

    check_upkeep.start()
    logger.info(f"✅ Upkeep scheduler task started (checks every {seconds}s)")

    return scheduler, check_upkeep
