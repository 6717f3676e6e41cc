"""Session token verification and token hashing.

Session tokens are issued by the external identity provider and signed with a
shared secret. This service only verifies them; ``create_session_token`` exists for
local development and tests.
"""

import secrets
from datetime import UTC, datetime, timedelta
from hashlib import sha256
from typing import Any

from jose import JWTError, jwt

from src.app.core.config import get_settings


def hash_token(token: str) -> str:
    """Hash a token using SHA256 for secure storage."""
    return sha256(token.encode()).hexdigest()


def generate_token() -> str:
    """Generate a URL-safe single-use token (invite links)."""
    return secrets.token_urlsafe(32)


def create_session_token(
    subject: str,
    email: str,
    name: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a session token shaped like the identity provider's."""
    settings = get_settings()
    expire = datetime.now(UTC) + (expires_delta or timedelta(hours=1))

    to_encode: dict[str, Any] = {
        "sub": subject,
        "email": email,
        "exp": expire,
    }
    if name:
        to_encode["name"] = name
    if settings.session_token_audience:
        to_encode["aud"] = settings.session_token_audience
    return jwt.encode(  # type: ignore[no-any-return]
        to_encode,
        settings.session_token_secret,
        algorithm=settings.session_token_algorithm,
    )


def decode_session_token(token: str) -> dict[str, Any] | None:
    """Decode and validate a session token. Returns None on any error."""
    settings = get_settings()
    options = {"verify_aud": settings.session_token_audience is not None}
    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            settings.session_token_secret,
            algorithms=[settings.session_token_algorithm],
            audience=settings.session_token_audience,
            options=options,
        )
    except JWTError:
        return None
    if not claims.get("sub") or not claims.get("email"):
        return None
    return claims
