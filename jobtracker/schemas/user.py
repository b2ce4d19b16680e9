"""
Pydantic schemas for dashboard sign-in and the auth provider's user payload.
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Any, Dict, Optional


class LoginRequest(BaseModel):
    """
    Sign-in form data.

    Without a password the provider emails a one-time code instead.
    """
    email: EmailStr
    password: Optional[str] = Field(default=None, max_length=256)
    next: str = "/dashboard"


class AuthUser(BaseModel):
    """The subset of the provider's user object the dashboard relies on."""
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = {}
    app_metadata: Dict[str, Any] = {}

    @property
    def full_name(self) -> Optional[str]:
        name = self.user_metadata.get("full_name")
        return name if isinstance(name, str) and name.strip() else None


class SessionTokens(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    user: Optional[AuthUser] = None
