"""
FastAPI dependencies for API-key checks and dashboard sessions.
"""

import hmac
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from jobtracker.core.config import settings
from jobtracker.core.database import get_db
from jobtracker.core.exceptions import UnauthorizedError
from jobtracker.dashboard.session import AuthSession, resolve_session
from jobtracker.services.auth_provider import SupabaseAuthService
from jobtracker.services.jobs_client import JobsApiClient

# x-api-key header scheme; auto_error is off so we control the 401 body
api_key_header = APIKeyHeader(name="x-api-key", auto_error=False)


async def require_api_key(api_key: Optional[str] = Depends(api_key_header)) -> None:
    """
    Reject the request unless x-api-key matches the configured key.

    Declared as a router dependency so it runs before the handler opens
    any database work.

    Raises:
        UnauthorizedError: header missing or wrong
    """
    if not api_key or not hmac.compare_digest(api_key.encode(), settings.API_KEY.encode()):
        raise UnauthorizedError("Unauthorized")


def get_auth_service() -> Optional[SupabaseAuthService]:
    """Auth provider client, or None when it is not configured."""
    if not settings.AUTH_CONFIGURED:
        return None
    return SupabaseAuthService.from_settings()


def get_jobs_client() -> JobsApiClient:
    return JobsApiClient.from_settings()


def requested_path(request: Request) -> str:
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"
    return path


async def get_auth_session(
    request: Request,
    provider: Optional[SupabaseAuthService] = Depends(get_auth_service),
    db: Session = Depends(get_db)
) -> AuthSession:
    """
    Resolve the dashboard session from the access-token cookie.

    The returned AuthSession is passed to views by the route; nothing keeps
    it between requests.
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    return await resolve_session(token, requested_path(request), provider, db)
