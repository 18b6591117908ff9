"""Password hashing helpers backed by passlib's bcrypt scheme."""

from __future__ import annotations

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a login attempt; malformed stored hashes count as a mismatch."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def needs_rehash(hashed_password: str) -> bool:
    """True when the stored hash uses outdated parameters and should be upgraded."""
    return pwd_context.needs_update(hashed_password)


__all__ = ["hash_password", "verify_password", "needs_rehash"]
