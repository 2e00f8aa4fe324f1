"""
Provably Fair Utilities for Randomness Fulfillment
Derives random words from a server seed with SHA-256 so any delivery can be
recomputed and checked after the fact
"""

import hashlib
import secrets
from typing import List, Optional, Tuple

WORD_BITS = 256


def generate_server_seed() -> str:
    """Cryptographically secure 64 character hex seed"""
    return secrets.token_hex(32)


def derive_random_words(server_seed: str, request_id: int, num_words: int) -> Tuple[List[int], str]:
    """
    Derive `num_words` random words for a randomness request.

    Algorithm:
    1. Concatenate: "server_seed:request_id"
    2. Compute SHA-256 -> proof_hash
    3. For word i, compute SHA-256 of "proof_hash:i"
    4. Interpret the full digest as a 256-bit integer

    Args:
        server_seed: Secret seed held by the coordinator
        request_id: Correlation id of the request being fulfilled
        num_words: Number of words to derive

    Returns:
        Tuple of (words, proof_hash)
    """
    if num_words <= 0:
        raise ValueError("num_words must be positive")

    proof_hash = hashlib.sha256(f"{server_seed}:{request_id}".encode()).hexdigest()

    words = []
    for i in range(num_words):
        digest = hashlib.sha256(f"{proof_hash}:{i}".encode()).hexdigest()
        words.append(int(digest, 16))

    return words, proof_hash


def verify_random_words(server_seed: str, request_id: int, words: List[int],
                        expected_hash: Optional[str] = None) -> bool:
    """
    Verify delivered words by recomputing them from the revealed seed.

    Args:
        server_seed: Revealed server seed
        request_id: Request the words were delivered for
        words: Delivered words
        expected_hash: Optional proof hash published with the delivery

    Returns:
        True if verification succeeds, False otherwise
    """
    if not words:
        return False

    computed, proof_hash = derive_random_words(server_seed, request_id, len(words))

    if expected_hash is not None and proof_hash != expected_hash:
        return False

    return computed == list(words)
