"""
Client for the hosted auth provider (Supabase GoTrue REST API).

The dashboard never stores passwords: it trades credentials for an access
token here, keeps the token in a cookie, and asks the provider who the token
belongs to on each protected page view.
API Documentation: https://supabase.com/docs/reference/self-hosting-auth/introduction
"""

import logging
import httpx
from typing import Optional

from jobtracker.core.config import settings
from jobtracker.schemas.user import AuthUser, SessionTokens

logger = logging.getLogger(__name__)


class AuthProviderError(Exception):
    """The provider rejected a request or returned something unusable."""
    pass


class AuthProviderTimeout(AuthProviderError):
    """The provider did not answer within the session-check timeout."""
    pass


def _describe_error(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"Auth provider returned {response.status_code}"
    for key in ("error_description", "msg", "message", "error"):
        value = payload.get(key) if isinstance(payload, dict) else None
        if isinstance(value, str) and value:
            return value
    return f"Auth provider returned {response.status_code}"


class SupabaseAuthService:
    """
    Supabase auth integration.

    Handles:
    - Password sign-in and emailed one-time codes
    - Resolving an access token to its user
    - Sign-out (token revocation)
    """

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        timeout: float = 6.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = f"{base_url.rstrip('/')}/auth/v1"
        self.anon_key = anon_key
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls) -> "SupabaseAuthService":
        return cls(
            base_url=settings.SUPABASE_URL,
            anon_key=settings.SUPABASE_ANON_KEY,
            timeout=settings.AUTH_CHECK_TIMEOUT_SECONDS,
        )

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"apikey": self.anon_key},
            timeout=self.timeout,
            transport=self.transport,
        )

    async def get_user(self, access_token: str) -> Optional[AuthUser]:
        """
        Resolve an access token to its user.

        Returns:
            The user, or None when the provider says the token is invalid

        Raises:
            AuthProviderTimeout: no answer within the timeout
            AuthProviderError: any other provider failure
        """
        try:
            async with self._client() as client:
                response = await client.get(
                    "/user",
                    headers={"Authorization": f"Bearer {access_token}"}
                )
        except httpx.TimeoutException as e:
            raise AuthProviderTimeout("The session check timed out") from e
        except httpx.HTTPError as e:
            raise AuthProviderError(f"Auth provider unreachable: {e}") from e

        if response.status_code in (401, 403):
            return None
        if response.status_code != 200:
            logger.error(f"Session lookup failed: {response.status_code} {response.text}")
            raise AuthProviderError(_describe_error(response))

        return AuthUser.model_validate(response.json())

    async def sign_in_with_password(self, email: str, password: str) -> SessionTokens:
        """
        Exchange email and password for a session.

        Raises:
            AuthProviderError: wrong credentials or provider failure
        """
        try:
            async with self._client() as client:
                response = await client.post(
                    "/token",
                    params={"grant_type": "password"},
                    json={"email": email.strip().lower(), "password": password}
                )
        except httpx.HTTPError as e:
            raise AuthProviderError(f"Auth provider unreachable: {e}") from e

        if response.status_code != 200:
            logger.warning(f"Password sign-in failed for {email}: {response.status_code}")
            raise AuthProviderError(_describe_error(response))

        return SessionTokens.model_validate(response.json())

    async def send_email_code(self, email: str) -> None:
        """
        Email a one-time sign-in code, creating the provider user if needed.

        Raises:
            AuthProviderError: provider failure
        """
        try:
            async with self._client() as client:
                response = await client.post(
                    "/otp",
                    json={"email": email.strip().lower(), "create_user": True}
                )
        except httpx.HTTPError as e:
            raise AuthProviderError(f"Auth provider unreachable: {e}") from e

        if response.status_code not in (200, 204):
            logger.warning(f"Sign-in code request failed for {email}: {response.status_code}")
            raise AuthProviderError(_describe_error(response))

    async def verify_email_code(self, email: str, code: str) -> SessionTokens:
        """
        Trade an emailed one-time code for a session.

        Raises:
            AuthProviderError: wrong/expired code or provider failure
        """
        try:
            async with self._client() as client:
                response = await client.post(
                    "/verify",
                    json={"type": "email", "email": email.strip().lower(), "token": code.strip()}
                )
        except httpx.HTTPError as e:
            raise AuthProviderError(f"Auth provider unreachable: {e}") from e

        if response.status_code != 200:
            logger.warning(f"Sign-in code rejected for {email}: {response.status_code}")
            raise AuthProviderError(_describe_error(response))

        return SessionTokens.model_validate(response.json())

    async def sign_out(self, access_token: str) -> None:
        """
        Revoke the session on the provider side.

        Raises:
            AuthProviderError: provider failure (the token may still be valid)
        """
        try:
            async with self._client() as client:
                response = await client.post(
                    "/logout",
                    headers={"Authorization": f"Bearer {access_token}"}
                )
        except httpx.HTTPError as e:
            raise AuthProviderError(f"Auth provider unreachable: {e}") from e

        # 401 means the token was already dead, which is what we wanted
        if response.status_code not in (200, 204, 401):
            raise AuthProviderError(_describe_error(response))
