"""
Account Ledger
Payment rail the raffle pays winners through (credit, debit, balance queries)
"""

from sqlalchemy import text
import logging

logger = logging.getLogger(__name__)


class InsufficientFunds(Exception):
    def __init__(self, account, balance, amount):
        self.account = account
        self.balance = balance
        self.amount = amount
        super().__init__(f"{account} holds {balance}, cannot debit {amount}")


class AccountLedger:
    """Stores account balances; every change runs in its own transaction"""

    def __init__(self, engine):
        self.engine = engine

    def get_balance(self, account):
        with self.engine.begin() as conn:
            return self._read_balance(conn, account)

    def credit(self, account, amount):
        """
        Add funds to an account

        Args:
            account: Account identifier
            amount: Amount to add (must be >= 0)

        Returns:
            int: New balance
        """
        if amount < 0:
            raise ValueError(f"Cannot credit a negative amount ({amount})")

        with self.engine.begin() as conn:
            new_balance = self._read_balance(conn, account) + amount
            self._write_balance(conn, account, new_balance)
            self._log_transfer(conn, account, amount, 'credit')

        logger.info(f"💸 Credited {amount} to {account} (balance: {new_balance})")
        return new_balance

    def debit(self, account, amount):
        """
        Remove funds from an account

        Args:
            account: Account identifier
            amount: Amount to remove (must be >= 0)

        Returns:
            int: New balance
        """
        if amount < 0:
            raise ValueError(f"Cannot debit a negative amount ({amount})")

        with self.engine.begin() as conn:
            balance = self._read_balance(conn, account)
            if balance < amount:
                raise InsufficientFunds(account, balance, amount)
            new_balance = balance - amount
            self._write_balance(conn, account, new_balance)
            self._log_transfer(conn, account, amount, 'debit')

        logger.info(f"Debited {amount} from {account} (balance: {new_balance})")
        return new_balance

    def get_transfers(self, account, limit=20):
        """Most recent ledger movements for an account, newest first"""
        with self.engine.begin() as conn:
            result = conn.execute(text("""
                SELECT amount, direction, created_at
                FROM raffle_transfers
                WHERE account = :account
                ORDER BY id DESC
                LIMIT :limit
            """), {'account': account, 'limit': limit})

            return [
                {'amount': int(row[0]), 'direction': row[1], 'created_at': row[2]}
                for row in result
            ]

    @staticmethod
    def _read_balance(conn, account):
        result = conn.execute(text("""
            SELECT balance FROM raffle_accounts WHERE account = :account
        """), {'account': account})
        row = result.fetchone()
        return int(row[0]) if row else 0

    @staticmethod
    def _write_balance(conn, account, balance):
        conn.execute(text("""
            INSERT INTO raffle_accounts (account, balance, last_updated)
            VALUES (:account, :balance, CURRENT_TIMESTAMP)
            ON CONFLICT (account)
            DO UPDATE SET
                balance = :balance,
                last_updated = CURRENT_TIMESTAMP
        """), {'account': account, 'balance': str(balance)})

    @staticmethod
    def _log_transfer(conn, account, amount, direction):
        conn.execute(text("""
            INSERT INTO raffle_transfers (account, amount, direction)
            VALUES (:account, :amount, :direction)
        """), {'account': account, 'amount': str(amount), 'direction': direction})
