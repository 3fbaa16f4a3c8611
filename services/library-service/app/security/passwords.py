"""Password hashing and temporary credential generation."""

from __future__ import annotations

import secrets
import string

import bcrypt

# bcrypt only consumes the first 72 bytes of its input.
_BCRYPT_MAX_BYTES = 72
_TEMP_ALPHABET = string.ascii_letters + string.digits


class BcryptHasher:
    """Salted adaptive password hashing backed by ``bcrypt``."""

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds

    def hash(self, plaintext: str) -> str:
        """Return a self-describing bcrypt hash (salt and cost embedded)."""
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(_encode(plaintext), salt).decode("utf-8")

    def verify(self, plaintext: str, hashed: str) -> bool:
        """Check ``plaintext`` against ``hashed`` in constant time.

        A stored value that is not a bcrypt hash never verifies.
        """
        try:
            return bcrypt.checkpw(_encode(plaintext), hashed.encode("utf-8"))
        except ValueError:
            return False


def generate_temporary_password(length: int = 8) -> str:
    """Return a random alphanumeric password for one-time delivery."""
    return "".join(secrets.choice(_TEMP_ALPHABET) for _ in range(length))


def _encode(plaintext: str) -> bytes:
    return plaintext.encode("utf-8")[:_BCRYPT_MAX_BYTES]
