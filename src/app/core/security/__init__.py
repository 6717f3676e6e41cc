"""Security utilities.

Re-exports all security-related functions for convenience.
"""

from src.app.core.security.crypto import (
    create_session_token,
    decode_session_token,
    generate_token,
    hash_token,
)

__all__ = [
    "create_session_token",
    "decode_session_token",
    "generate_token",
    "hash_token",
]
