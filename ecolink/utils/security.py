"""
Security utilities: password hashing and session tokens.
"""

import hashlib
import logging
import secrets
from typing import Optional

import bcrypt

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a plaintext password using bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, stored_hash: Optional[str]) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    if not stored_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), stored_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a bcrypt hash")
        return False


def generate_session_token() -> str:
    return secrets.token_hex(32)


def hash_token(token: Optional[str]) -> Optional[str]:
    """
    SHA-256 of a session token. Session documents are keyed by this value,
    never by the token itself.

    Returns:
        Hex digest, or None for a missing/blank token
    """
    if not token or not token.strip():
        return None
    return hashlib.sha256(token.strip().encode()).hexdigest()
