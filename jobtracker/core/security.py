"""
Session token helpers for the dashboard.

Access tokens are JWTs issued by the auth provider. We only peek at their
claims here (expiry); the provider validates signatures.
"""

import time
from typing import Optional
from fastapi import Response
from jose import JWTError, jwt
from jobtracker.core.config import settings


def decode_unverified(token: str) -> Optional[dict]:
    """
    Read a JWT's claims without checking the signature.

    Returns:
        The claims, or None if the token is not a JWT
    """
    try:
        return jwt.get_unverified_claims(token)
    except JWTError:
        return None


def is_token_expired(token: str, leeway_seconds: int = 0) -> bool:
    """
    Check the exp claim. Unparseable tokens count as expired; tokens without
    an exp claim do not.
    """
    claims = decode_unverified(token)
    if claims is None:
        return True

    exp = claims.get("exp")
    if exp is None:
        return False
    try:
        return time.time() + leeway_seconds >= float(exp)
    except (TypeError, ValueError):
        return True


def set_session_cookie(response: Response, token: str, max_age: Optional[int] = None) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        max_age=max_age or settings.SESSION_COOKIE_MAX_AGE,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
