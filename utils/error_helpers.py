"""
Error handling helpers for the raffle API routes
Maps raffle errors onto JSON error responses
"""

import logging
from contextlib import contextmanager
from functools import wraps

from flask import jsonify

from vrf_raffle.errors import AuthorizationError, RaffleError

logger = logging.getLogger(__name__)

# First match wins, so subclasses come before their bases
ERROR_STATUS = [
    (AuthorizationError, 403),
    (RaffleError, 409),
    (ValueError, 400),
    (TypeError, 400),
    (LookupError, 404),
]


def api_error_handler(func):
    """
    Decorator turning exceptions raised by a route into JSON error responses

    Raffle errors keep their message and report their class name as `type`,
    lookups become a plain 404 and anything unexpected a 500.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            status_code = next((code for error_type, code in ERROR_STATUS if isinstance(e, error_type)), 500)

            if isinstance(e, RaffleError):
                logger.info(f"🚫 {func.__name__} rejected: {e}")
                return json_error(e, status_code, type=type(e).__name__)
            if status_code == 404:
                logger.warning(f"Not found in {func.__name__}: {e}")
                return json_error('Resource not found', 404)
            if status_code == 400:
                logger.warning(f"Bad request in {func.__name__}: {e}")
                return json_error(e, 400)

            logger.error(f"❌ Unexpected error in {func.__name__}: {e}", exc_info=True)
            return json_error('Internal server error', 500)
    return wrapper


def json_success(data=None, message=None, **fields):
    """
    Success response: {'success': True, 'data': ..., 'message': ..., **fields}

    `data` and `message` are left out when not given.
    """
    body = {'success': True}
    if data is not None:
        body['data'] = data
    if message:
        body['message'] = message
    body.update(fields)
    return jsonify(body)


def json_error(error, status_code=400, **fields):
    body = {'success': False, 'error': str(error), **fields}
    return jsonify(body), status_code


@contextmanager
def log_exceptions(operation, **context):
    """
    Log any exception raised inside the block with its context, then re-raise it

    Usage:
        with log_exceptions("deploying raffle", chain_id=31337):
            deploy_raffle(...)
    """
    try:
        yield
    except Exception as e:
        details = ', '.join(f"{key}={value}" for key, value in context.items())
        logger.error(f"❌ Error during {operation} [{details}]: {e}", exc_info=True)
        raise
