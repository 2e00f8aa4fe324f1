"""
Startup script to run the raffle: query API plus the upkeep loop
"""
import asyncio
import os
import threading

from dotenv import load_dotenv

# Raffle settings are read from the environment at import time
load_dotenv()

from sqlalchemy import create_engine

from utils.error_helpers import log_exceptions
from utils.logging_config import log_error, setup_logging
from utils.redis_publisher import RaffleEventPublisher
from vrf_raffle import config
from vrf_raffle.api import create_app
from vrf_raffle.database import setup_raffle_database
from vrf_raffle.deploy import deploy_raffle
from vrf_raffle.history import RaffleHistory
from vrf_raffle.ledger import AccountLedger
from vrf_raffle.scheduler import setup_upkeep_scheduler


def create_database_engine(database_url):
    # Convert postgres:// to postgresql://
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
    return create_engine(database_url, pool_pre_ping=True)


def run_api(app, port):
    app.run(host='0.0.0.0', port=port, use_reloader=False)


async def run_raffle(logger):
    engine = create_database_engine(config.DATABASE_URL)
    if not setup_raffle_database(engine):
        raise RuntimeError("Raffle database schema could not be created")

    history = RaffleHistory(engine)
    with log_exceptions("deploying raffle", chain_id=config.CHAIN_ID):
        raffle, coordinator, network = deploy_raffle(
            chain_id=config.CHAIN_ID,
            payments=AccountLedger(engine),
            publisher=RaffleEventPublisher(),
            history=history,
        )

    app = create_app(raffle, history=history, allow_upkeep=False)
    api_thread = threading.Thread(target=run_api, args=(app, config.API_PORT), daemon=True)
    api_thread.start()
    logger.info(f"📡 Query API listening on port {config.API_PORT}")

    local_coordinator = coordinator if network.is_local else None
    scheduler, upkeep_loop = await setup_upkeep_scheduler(raffle, local_coordinator=local_coordinator)

    # upkeep_loop runs as a task on this event loop until the process stops
    await asyncio.Event().wait()


def main():
    logger = setup_logging('vrf_raffle', log_file=os.getenv('LOG_FILE'))
    logger.info("🚀 Starting raffle...")

    try:
        asyncio.run(run_raffle(logger))
    except KeyboardInterrupt:
        logger.info("Shutting down")
    except Exception as e:
        log_error(logger, e, "Raffle stopped")
        raise


if __name__ == "__main__":
    main()
