"""
Security Utilities.

Credential helpers for note locking. Lock passwords are stored as bcrypt
hashes when security.yaml enables hashing; stores written by older
releases hold the plaintext value, which is still accepted on unlock.
"""

import hmac

import bcrypt

from modules.sticky.core.logging import get_logger

logger = get_logger(__name__)

_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password using bcrypt."""
    password_bytes = password.encode("utf-8")
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password_bytes, salt).decode("utf-8")


def is_password_hash(stored: str) -> bool:
    """Check whether a stored credential is a bcrypt hash."""
    return stored.startswith(_BCRYPT_PREFIXES) and len(stored) == 60


def verify_password(plain_password: str, stored: str) -> bool:
    """
    Verify a password against a stored lock credential.

    Args:
        plain_password: Password presented by the user
        stored: bcrypt hash, or a legacy plaintext password

    Returns:
        True if the password matches
    """
    if is_password_hash(stored):
        try:
            return bcrypt.checkpw(
                plain_password.encode("utf-8"),
                stored.encode("utf-8"),
            )
        except ValueError as e:
            logger.warning("Malformed password hash", extra={"error": str(e)})
            return False
    return hmac.compare_digest(
        plain_password.encode("utf-8"),
        stored.encode("utf-8"),
    )


def make_credential(password: str, hash_passwords: bool, rounds: int = 12) -> str:
    """Build the value stored in a locked note's password field."""
    if hash_passwords:
        return hash_password(password, rounds=rounds)
    return password
