"""
Password Utilities for Authentication Service

bcrypt hashing and verification for stored user credentials.
"""

import logging
from typing import Optional, Tuple

import bcrypt

logger = logging.getLogger(__name__)

# Bcrypt work factor
BCRYPT_ROUNDS = 12

# bcrypt ignores input beyond 72 bytes and newer releases reject it
MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode('utf-8')[:MAX_PASSWORD_BYTES]


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """
    Hash a password using bcrypt.

    Args:
        password: Plain text password
        rounds: Work factor (tests pass a low value)

    Returns:
        Bcrypt hash string
    """
    if not password:
        raise ValueError("Password must not be empty")
    hashed = bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds=rounds))
    return hashed.decode('utf-8')


def verify_password(password: Optional[str], password_hash: Optional[str]) -> bool:
    """
    Verify a password against its hash.

    Returns:
        True if password matches, False otherwise (including malformed hashes)
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode('utf-8'))
    except ValueError as e:
        logger.error(f"Password verification failed: {e}")
        return False


# Checked against when the username is unknown
DUMMY_PASSWORD_HASH = hash_password("not-a-real-password")


def check_password_strength(password: str, min_length: int = 8) -> Tuple[bool, Optional[str]]:
    """
    Check a password against minimum requirements.

    Returns:
        (is_strong, reason)
    """
    if len(password) < min_length:
        return False, f"shorter than {min_length} characters"
    if not any(c.isalpha() for c in password) or not any(c.isdigit() for c in password):
        return False, "should mix letters and digits"
    return True, None
