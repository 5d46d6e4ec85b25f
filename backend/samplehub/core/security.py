"""
Secret hashing utilities for passwords and one-time codes.
"""
import secrets
import string
from functools import lru_cache
from typing import Optional

from passlib.context import CryptContext

DEFAULT_BCRYPT_ROUNDS = 10

GENERATED_PASSWORD_ALPHABET = string.ascii_letters + string.digits


@lru_cache
def get_crypt_context(rounds: int = DEFAULT_BCRYPT_ROUNDS) -> CryptContext:
    """Bcrypt context for the given cost factor, shared per process."""
    return CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)


def hash_secret(plaintext: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """
    Hash a password or OTP using bcrypt with a fresh salt.

    Args:
        plaintext: The secret to hash
        rounds: Bcrypt cost factor

    Returns:
        Hashed secret string
    """
    return get_crypt_context(rounds).hash(plaintext)


def verify_secret(plaintext: str, hashed: Optional[str]) -> bool:
    """
    Verify a plaintext secret against a stored bcrypt hash.

    Args:
        plaintext: The submitted secret
        hashed: The stored hash, possibly missing

    Returns:
        True if the secret matches, False otherwise (including a missing hash)
    """
    if not hashed:
        return False
    return get_crypt_context().verify(plaintext, hashed)


def generate_password(length: int = 10) -> str:
    """Random alphanumeric password for server-generated credentials."""
    return "".join(secrets.choice(GENERATED_PASSWORD_ALPHABET) for _ in range(length))


def generate_otp() -> str:
    """Six-digit one-time code in [100000, 999999]."""
    return str(secrets.randbelow(900000) + 100000)
