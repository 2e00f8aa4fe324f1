"""
Database Schema Setup for the Raffle
Creates the ledger, entry log and draw history tables
"""

from sqlalchemy import inspect, text
import logging

logger = logging.getLogger(__name__)

# Amounts are stored as decimal text: wei values overflow BIGINT and SQLite
# would silently turn large NUMERIC values into floats.
RAFFLE_SCHEMA_SQL = """
-- ============================================
-- RAFFLE DATABASE SCHEMA
-- ============================================

-- Account balances paid out by the raffle
CREATE TABLE IF NOT EXISTS raffle_accounts (
    account TEXT PRIMARY KEY,
    balance TEXT NOT NULL DEFAULT '0',
    last_updated TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Ledger transaction log (audit trail)
CREATE TABLE IF NOT EXISTS raffle_transfers (
    id {id_column},
    account TEXT NOT NULL,
    amount TEXT NOT NULL,
    direction VARCHAR(10) NOT NULL,  -- 'credit', 'debit'
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Accepted entries per round; reset_at is set when an owner reset removed the entry
CREATE TABLE IF NOT EXISTS raffle_entries (
    id {id_column},
    raffle_id TEXT NOT NULL,
    round_number INTEGER NOT NULL,
    player TEXT NOT NULL,
    amount TEXT NOT NULL,
    entered_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    reset_at TIMESTAMP
);

-- Resolved rounds
CREATE TABLE IF NOT EXISTS raffle_draws (
    id {id_column},
    raffle_id TEXT NOT NULL,
    round_number INTEGER NOT NULL,
    request_id INTEGER NOT NULL,
    winner TEXT NOT NULL,
    prize TEXT NOT NULL,
    winner_index INTEGER NOT NULL,
    total_participants INTEGER NOT NULL,
    random_word TEXT NOT NULL,
    drawn_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    UNIQUE(raffle_id, round_number)
);

-- ============================================
-- INDICES FOR PERFORMANCE
-- ============================================

CREATE INDEX IF NOT EXISTS idx_raffle_transfers_account ON raffle_transfers(account);
CREATE INDEX IF NOT EXISTS idx_raffle_entries_round ON raffle_entries(raffle_id, round_number);
CREATE INDEX IF NOT EXISTS idx_raffle_draws_winner ON raffle_draws(winner);
"""

REQUIRED_TABLES = [
    'raffle_accounts',
    'raffle_transfers',
    'raffle_entries',
    'raffle_draws',
]


def _schema_statements(dialect_name):
    """Split the schema into single statements, SQLite can only execute one at a time"""
    if dialect_name == 'postgresql':
        id_column = 'SERIAL PRIMARY KEY'
    else:
        id_column = 'INTEGER PRIMARY KEY AUTOINCREMENT'

    statements = []
    current_statement = []

    for line in RAFFLE_SCHEMA_SQL.split('\n'):
        stripped = line.strip()
        if not stripped or stripped.startswith('--'):
            continue

        current_statement.append(line)

        if stripped.endswith(';'):
            statements.append('\n'.join(current_statement).replace('{id_column}', id_column))
            current_statement = []

    return statements


def setup_raffle_database(engine):
    """
    Create all raffle tables and indices

    Args:
        engine: SQLAlchemy engine instance

    Returns:
        bool: True if successful, False otherwise
    """
    try:
        logger.info("Setting up raffle database schema...")

        with engine.begin() as conn:
            for statement in _schema_statements(engine.dialect.name):
                conn.execute(text(statement))

        logger.info("✅ Raffle database schema created successfully")
        return True

    except Exception as e:
        logger.error(f"❌ Failed to setup raffle database: {e}")
        return False


def verify_raffle_schema(engine):
    """
    Verify that all required tables exist

    Args:
        engine: SQLAlchemy engine instance

    Returns:
        dict: Status of each table (True/False)
    """
    try:
        existing = set(inspect(engine).get_table_names())
    except Exception as e:
        logger.error(f"Failed to verify schema: {e}")
        existing = set()

    return {table: table in existing for table in REQUIRED_TABLES}
