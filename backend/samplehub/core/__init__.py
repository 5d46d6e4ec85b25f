"""
Core module - Hashing, tokens, cookies, errors and rate limiting.
"""
from samplehub.core.security import hash_secret, verify_secret
from samplehub.core.tokens import TokenService, TokenType
from samplehub.core.rate_limit import check_rate_limit, enforce_rate_limit

__all__ = [
    "hash_secret",
    "verify_secret",
    "TokenService",
    "TokenType",
    "check_rate_limit",
    "enforce_rate_limit",
]
