# bloogle/core/security.py
"""
Security module for authentication primitives.
Handles password hashing, opaque token generation and digesting of values
that must never be stored in plain text (session handles, image payloads).
"""
import hashlib
import secrets
from passlib.context import CryptContext

# Password hashing context
# Argon2 is a modern, memory-hard password hashing algorithm with a per-hash salt
pwd_context = CryptContext(
    schemes=["argon2"],  # Use Argon2 for password hashing
    deprecated="auto",   # Automatically handle deprecated schemes
)

# 32 random bytes -> 256 bits of entropy, URL-safe so it can travel in links and cookies
TOKEN_BYTES = 32


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)

    Note: Never store plain text passwords. Always use this function before saving.
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    Args:
        plain: Plain text password to verify
        hashed: Hashed password from database

    Returns:
        True if password matches, False otherwise
        (also False when `hashed` is not a recognised hash, e.g. a plain text value)
    """
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False


def dummy_verify() -> None:
    """
    Spend the same hashing work as a real verification.

    Called when the username does not exist, so a login miss costs as much
    time as a wrong password.
    """
    pwd_context.dummy_verify()


def new_opaque_token() -> str:
    """Return a fresh URL-safe random token (verification links, session handles)."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def sha256_hex(raw: str | bytes) -> str:
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    return hashlib.sha256(raw).hexdigest()
