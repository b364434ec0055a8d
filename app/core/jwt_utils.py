"""
JWT Token Utilities

This module handles JSON Web Token (JWT) creation and verification for wallet authentication.
After the Session Issuer accepts a wallet signature, this module creates the bearer credential
that is presented on every protected API request.

Flow:
1. User verifies wallet signature -> create_access_token() generates JWT
2. User makes API request with JWT in Authorization header -> verify_token() validates it
3. Protected endpoints use get_current_user() from dependencies.py to resolve the user

The JWT contains:
- sub: The user id (as a string)
- wallet_address: The wallet address bound to the user at login (may be null)
- iat: Issued at timestamp
- exp: Expiration timestamp (fixed window, ACCESS_TOKEN_EXPIRE_SECONDS, 24 hours)
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from app.core.config import Settings
from app.core.errors import Forbidden


def create_access_token(
    user_id: int,
    wallet_address: Optional[str],
    *,
    settings: Settings,
    issued_at: Optional[datetime] = None,
) -> str:
    """
    Create a JWT access token for an authenticated user.

    Args:
        user_id: Identifier of the user the token is issued to
        wallet_address: Wallet address bound to the user, if any
        settings: Runtime settings holding the signing key and validity window
        issued_at: Issuance time, defaults to now (UTC)

    Returns:
        A JWT token string for the Authorization: Bearer <token> header
    """
    now = issued_at or datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "wallet_address": wallet_address,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=settings.ACCESS_TOKEN_EXPIRE_SECONDS)).timestamp()),
    }
    return jwt.encode(payload, settings.ENCODE_KEY, algorithm=settings.ENCODE_ALGORITHM)


def verify_token(token: str, *, settings: Settings) -> Dict[str, Any]:
    """
    Verify and decode a JWT token.

    Checks the signature, the expiry and the required claims. A token that was
    presented but fails any check is a 403, not a 401: the caller did attempt
    to authenticate.

    Returns:
        Decoded payload with an integer `user_id` added

    Raises:
        Forbidden: If the token is expired, tampered, malformed or lacks claims
    """
    try:
        payload = jwt.decode(
            token,
            settings.ENCODE_KEY,
            algorithms=[settings.ENCODE_ALGORITHM],
            options={"require": ["sub", "iat", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise Forbidden("Token expired")
    except jwt.InvalidTokenError:
        raise Forbidden("Failed to authenticate token")

    try:
        payload["user_id"] = int(payload["sub"])
    except (TypeError, ValueError):
        raise Forbidden("Invalid token payload")

    return payload
