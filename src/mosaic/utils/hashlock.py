"""Secret and hash lock generation.

A transfer is declared with a hash lock and progressed by revealing the
unlock secret behind it:

    unlock_secret = keccak256(secret)
    hash_lock     = keccak256(unlock_secret)

``secret`` is the human-held string, ``unlock_secret`` is the 32-byte value
the contracts receive on progression.
"""

import secrets
from dataclasses import dataclass
from typing import Any, Dict

from web3 import Web3

from ..errors import ValidationError


@dataclass(frozen=True)
class HashLock:
    """Secret, unlock secret and hash lock triple."""

    secret: str
    unlock_secret: str
    hash_lock: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "secret": self.secret,
            "unlock_secret": self.unlock_secret,
            "hash_lock": self.hash_lock,
        }


def to_hash_lock(secret: str) -> HashLock:
    """Derive the hash lock for a known secret string."""
    if not isinstance(secret, str) or not secret:
        raise ValidationError(
            f"Invalid secret: {secret}.", field="secret", value=secret, expected="string"
        )
    unlock_secret = Web3.keccak(text=secret)
    hash_lock = Web3.keccak(unlock_secret)
    return HashLock(
        secret=secret,
        unlock_secret=Web3.to_hex(unlock_secret),
        hash_lock=Web3.to_hex(hash_lock),
    )


def create_secret_hash_lock() -> HashLock:
    """Generate a fresh random secret and its hash lock."""
    return to_hash_lock(secrets.token_hex(32))


def is_valid_unlock_secret(unlock_secret: str, hash_lock: str) -> bool:
    """Check that revealing ``unlock_secret`` opens ``hash_lock``."""
    try:
        digest = Web3.keccak(hexstr=unlock_secret)
    except (TypeError, ValueError):
        return False
    return Web3.to_hex(digest).lower() == str(hash_lock).lower()

