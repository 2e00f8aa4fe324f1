"""
Raffle History
Audit trail of accepted entries and resolved draws
"""

from sqlalchemy import text
import logging

from .config import RAFFLE_ID

logger = logging.getLogger(__name__)


class RaffleHistory:
    """
    Records raffle activity for one deployment

    Rows are keyed by (raffle_id, round_number). A failed write is logged
    and never blocks the raffle.
    """

    def __init__(self, engine, raffle_id=RAFFLE_ID):
        self.engine = engine
        self.raffle_id = raffle_id

    def next_round_number(self):
        """
        First round number not used by any recorded entry or draw

        A restarted raffle continues from here instead of reusing old rounds.
        """
        try:
            with self.engine.begin() as conn:
                result = conn.execute(text("""
                    SELECT MAX(round_number) FROM (
                        SELECT round_number FROM raffle_entries WHERE raffle_id = :raffle_id
                        UNION ALL
                        SELECT round_number FROM raffle_draws WHERE raffle_id = :raffle_id
                    ) AS rounds
                """), {'raffle_id': self.raffle_id})
                last_round = result.scalar()

            return (last_round or 0) + 1

        except Exception as e:
            logger.error(f"Failed to read last round of raffle {self.raffle_id}: {e}")
            return 1

    def record_entry(self, round_number, player, amount):
        """
        Log an accepted entry

        Returns:
            bool: True if successful
        """
        try:
            with self.engine.begin() as conn:
                conn.execute(text("""
                    INSERT INTO raffle_entries (raffle_id, round_number, player, amount)
                    VALUES (:raffle_id, :round_number, :player, :amount)
                """), {
                    'raffle_id': self.raffle_id,
                    'round_number': round_number,
                    'player': player,
                    'amount': str(amount)
                })
            return True

        except Exception as e:
            logger.error(f"Failed to record entry of {player} in round #{round_number}: {e}")
            return False

    def record_reset(self, round_number):
        """
        Mark every live entry of a round as removed by an owner reset

        Returns:
            bool: True if successful
        """
        try:
            with self.engine.begin() as conn:
                conn.execute(text("""
                    UPDATE raffle_entries
                    SET reset_at = CURRENT_TIMESTAMP
                    WHERE raffle_id = :raffle_id
                      AND round_number = :round_number
                      AND reset_at IS NULL
                """), {'raffle_id': self.raffle_id, 'round_number': round_number})
            return True

        except Exception as e:
            logger.error(f"Failed to record reset of round #{round_number}: {e}")
            return False

    def record_draw(self, round_number, request_id, winner, prize, winner_index,
                    total_participants, random_word):
        """
        Log a resolved round

        Returns:
            bool: True if successful
        """
        try:
            with self.engine.begin() as conn:
                conn.execute(text("""
                    INSERT INTO raffle_draws
                        (raffle_id, round_number, request_id, winner, prize, winner_index,
                         total_participants, random_word)
                    VALUES
                        (:raffle_id, :round_number, :request_id, :winner, :prize, :winner_index,
                         :total_participants, :random_word)
                """), {
                    'raffle_id': self.raffle_id,
                    'round_number': round_number,
                    'request_id': request_id,
                    'winner': winner,
                    'prize': str(prize),
                    'winner_index': winner_index,
                    'total_participants': total_participants,
                    'random_word': str(random_word)
                })
            return True

        except Exception as e:
            logger.error(f"Failed to record draw for round #{round_number}: {e}")
            return False

    def get_draw_history(self, limit=5):
        """
        Get recent draw results

        Args:
            limit: Number of draws to return

        Returns:
            list: Draw results, newest first
        """
        try:
            with self.engine.begin() as conn:
                result = conn.execute(text("""
                    SELECT
                        round_number,
                        request_id,
                        winner,
                        prize,
                        winner_index,
                        total_participants,
                        random_word,
                        drawn_at
                    FROM raffle_draws
                    WHERE raffle_id = :raffle_id
                    ORDER BY round_number DESC
                    LIMIT :limit
                """), {'raffle_id': self.raffle_id, 'limit': limit})

                history = []
                for row in result:
                    history.append({
                        'round_number': row[0],
                        'request_id': row[1],
                        'winner': row[2],
                        'prize': int(row[3]),
                        'winner_index': row[4],
                        'total_participants': row[5],
                        'random_word': int(row[6]),
                        'drawn_at': row[7]
                    })

                return history

        except Exception as e:
            logger.error(f"Failed to get draw history: {e}")
            return []

    def get_round_entries(self, round_number, include_reset=False):
        """
        Entries of one round in the order they were accepted

        Args:
            round_number: Round to read
            include_reset: Also return entries an owner reset removed
        """
        live_only = "" if include_reset else "AND reset_at IS NULL"

        try:
            with self.engine.begin() as conn:
                result = conn.execute(text(f"""
                    SELECT player, amount, entered_at, reset_at
                    FROM raffle_entries
                    WHERE raffle_id = :raffle_id
                      AND round_number = :round_number
                      {live_only}
                    ORDER BY id
                """), {'raffle_id': self.raffle_id, 'round_number': round_number})

                return [
                    {'player': row[0], 'amount': int(row[1]), 'entered_at': row[2], 'reset_at': row[3]}
                    for row in result
                ]

        except Exception as e:
            logger.error(f"Failed to get entries for round #{round_number}: {e}")
            return []
