"""Password hashing and session token generation."""

import secrets

from passlib.context import CryptContext

# Session ids carry 256 bits of entropy, hex encoded
SESSION_TOKEN_BYTES = 32

MIN_PASSWORD_LENGTH = 8

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


def hash_password(raw_password: str) -> str:
    """Hash a plaintext password."""
    return pwd_context.hash(raw_password)


def verify_password(raw_password: str, password_hash: str) -> bool:
    """Verify a plaintext password against its stored hash.

    Malformed or unknown hash formats verify as False rather than raising.
    """
    try:
        return pwd_context.verify(raw_password, password_hash)
    except (ValueError, TypeError):
        return False


def generate_session_token() -> str:
    """Generate an opaque, high-entropy session identifier."""
    return secrets.token_hex(SESSION_TOKEN_BYTES)
