"""
Centralized logging configuration for the raffle service
Console output plus an optional rotating log file
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

CONSOLE_FORMAT = '[%(asctime)s] %(levelname)-8s %(message)s'
FILE_FORMAT = '[%(asctime)s] %(levelname)-8s [%(name)s:%(lineno)d] %(message)s'

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3


def _rotating_file_handler(log_file, level):
    directory = os.path.dirname(log_file)
    if directory:
        os.makedirs(directory, exist_ok=True)

    handler = RotatingFileHandler(
        log_file,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding='utf-8',
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    return handler


def setup_logging(app_name='vrf_raffle', log_level=None, log_file=None):
    """
    Configure the raffle loggers

    Args:
        app_name: Logger to configure (the package name covers every module)
        log_level: Level name; LOG_LEVEL from the environment when omitted
        log_file: Optional path of a rotating log file

    Returns:
        logging.Logger: The configured logger
    """
    level_name = (log_level or os.getenv('LOG_LEVEL', 'INFO')).upper()
    level = getattr(logging, level_name, logging.INFO)

    raffle_logger = logging.getLogger(app_name)
    raffle_logger.setLevel(level)
    # Reconfiguring must not stack handlers
    raffle_logger.handlers.clear()
    raffle_logger.propagate = False

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
    raffle_logger.addHandler(console)

    if log_file:
        try:
            raffle_logger.addHandler(_rotating_file_handler(log_file, level))
            raffle_logger.info(f"📝 Writing logs to {log_file}")
        except OSError as e:
            raffle_logger.error(f"❌ Could not open log file {log_file}: {e}")

    return raffle_logger


def log_round_transition(logger, round_number, old_state, new_state, reason=None):
    """Log a raffle state change"""
    msg = f"🔄 Round #{round_number}: {old_state.name} -> {new_state.name}"
    if reason:
        msg += f" ({reason})"
    logger.info(msg)


def log_error(logger, error, context=None):
    message = f"{context}: {error}" if context else str(error)
    logger.error(f"❌ {message}", exc_info=True)
