"""Password hashing capability.

bcrypt behind a small protocol so services never touch the hash algorithm
directly and tests can lower the cost factor.

bcrypt only reads the first 72 bytes of its input (newer releases reject
longer input outright), so passwords are first reduced to the base64 of
their SHA-256 digest. That is 44 ASCII bytes with no NUL, whatever the
password length.
"""

import base64
import hashlib
from typing import Protocol

import bcrypt

# bcrypt cost factor for password hashing
_BCRYPT_ROUNDS = 12

# Pre-computed bcrypt hash for timing-safe comparison on account-not-found.
# Security: prevents account enumeration via response time differences.
# Any valid cost-12 digest works; the comparison result is discarded.
DUMMY_HASH = b"$2b$12$ZP2PVB8yI35X.mkRqcUPUuSzJA1CNRt4dZ7X3cyrfJu.2S3w.Qen2"


def _prehash(password: str) -> bytes:
    return base64.b64encode(hashlib.sha256(password.encode()).digest())


class PasswordHasher(Protocol):
    """One-way password hash and verification."""

    def hash(self, password: str) -> str: ...

    def verify(self, password: str, digest: str) -> bool: ...

    def verify_dummy(self, password: str) -> None: ...


class BcryptPasswordHasher:
    """bcrypt implementation of PasswordHasher.

    Args:
        rounds: bcrypt cost factor (4-31).
    """

    def __init__(self, rounds: int = _BCRYPT_ROUNDS) -> None:
        self._rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a plain-text password.

        Returns:
            bcrypt digest as text, safe to store.
        """
        return bcrypt.hashpw(
            _prehash(password), bcrypt.gensalt(rounds=self._rounds)
        ).decode()

    def verify(self, password: str, digest: str) -> bool:
        """Check a plain-text password against a stored digest.

        A digest that is not valid bcrypt output verifies as False.
        """
        try:
            return bcrypt.checkpw(_prehash(password), digest.encode())
        except ValueError:
            return False

    def verify_dummy(self, password: str) -> None:
        """Burn the same time as a real verification.

        Security: called when no account matched so the response time does
        not reveal whether the email exists.
        """
        bcrypt.checkpw(_prehash(password), DUMMY_HASH)
