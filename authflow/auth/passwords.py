"""Password and reset-token primitives.

Passwords are hashed with bcrypt. Reset tokens are random hex strings; only
their SHA-256 digest is ever stored, so a leaked database row cannot be
replayed against the reset endpoint.
"""

import hashlib
import logging
import secrets

import bcrypt

logger = logging.getLogger(__name__)

RESET_TOKEN_BYTES = 32


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password to hash.
        rounds: bcrypt cost factor.

    Returns:
        Bcrypt hash string with the salt embedded.

    Raises:
        ValueError: If password is empty.
    """
    if not password:
        raise ValueError("Password cannot be empty")

    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str | None, password_hash: str | None) -> bool:
    """Check a candidate password against a stored bcrypt hash.

    ``bcrypt.checkpw`` compares in constant time. A malformed stored hash is
    logged and treated as a mismatch.
    """
    if not password or not password_hash:
        return False

    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError as exc:
        logger.warning("Password verification failed: %s", exc)
        return False


def generate_reset_token() -> str:
    return secrets.token_hex(RESET_TOKEN_BYTES)


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
