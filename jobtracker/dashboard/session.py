"""
Session state for protected dashboard pages.

An AuthSession moves checking -> authed | anon exactly once per request and
is handed to views explicitly. evaluate_gate turns it into what the page
should do: render, redirect to login, keep waiting, or deny.
"""

import enum
import logging
from typing import List, Optional
from urllib.parse import quote, urlsplit

from sqlalchemy.orm import Session

from jobtracker.crud import app_user as app_user_crud
from jobtracker.models.app_user import AppUser, UserRole
from jobtracker.schemas.user import AuthUser
from jobtracker.core.security import is_token_expired
from jobtracker.services.auth_provider import AuthProviderError, AuthProviderTimeout, SupabaseAuthService

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
DEFAULT_NEXT_PATH = "/dashboard"
CONFIG_ERROR = "Missing SUPABASE_URL/SUPABASE_ANON_KEY"

ROLE_PRIORITY = {
    UserRole.VIEWER: 1,
    UserRole.STAFF: 2,
    UserRole.ADMIN: 3,
}


class AuthStatus(str, enum.Enum):
    CHECKING = "checking"
    AUTHED = "authed"
    ANON = "anon"


class GateOutcome(str, enum.Enum):
    RENDER = "render"
    REDIRECT = "redirect"
    WAITING = "waiting"
    DENIED = "denied"


def has_required_role(current: Optional[UserRole], required: Optional[UserRole]) -> bool:
    if required is None:
        return True
    return ROLE_PRIORITY.get(current, 0) >= ROLE_PRIORITY.get(required, 0)


def safe_next_path(candidate: Optional[str]) -> str:
    """Only same-site paths are allowed as post-login targets."""
    if not candidate:
        return DEFAULT_NEXT_PATH
    parts = urlsplit(candidate)
    if parts.scheme or parts.netloc or not candidate.startswith("/") or candidate.startswith("//"):
        return DEFAULT_NEXT_PATH
    if parts.path == LOGIN_PATH:
        return DEFAULT_NEXT_PATH
    return candidate


def login_redirect_url(requested_path: str) -> str:
    return f"{LOGIN_PATH}?next={quote(safe_next_path(requested_path), safe='')}"


class AuthSession:
    """
    Per-request authentication context.

    Starts in CHECKING. Exactly one of mark_authed/mark_anon settles it;
    mark_timed_out leaves it CHECKING but flags that the check gave up.
    """

    def __init__(self, requested_path: str = DEFAULT_NEXT_PATH):
        self.requested_path = requested_path
        self.status = AuthStatus.CHECKING
        self.user: Optional[AuthUser] = None
        self.profile: Optional[AppUser] = None
        self.error: Optional[str] = None
        self.timed_out = False

    def mark_authed(self, user: AuthUser, profile: Optional[AppUser] = None) -> None:
        self.status = AuthStatus.AUTHED
        self.user = user
        self.profile = profile
        self.error = None
        self.timed_out = False

    def mark_anon(self, error: Optional[str] = None) -> None:
        self.status = AuthStatus.ANON
        self.user = None
        self.profile = None
        self.error = error
        self.timed_out = False

    def mark_timed_out(self, error: Optional[str] = None) -> None:
        self.status = AuthStatus.CHECKING
        self.timed_out = True
        self.error = error

    @property
    def role(self) -> Optional[UserRole]:
        return self.profile.role if self.profile else None

    @property
    def email(self) -> Optional[str]:
        if self.profile and self.profile.email:
            return self.profile.email
        return self.user.email if self.user else None

    @property
    def identities(self) -> List[str]:
        """Strings a job's owner field may hold for this user."""
        values = [self.email]
        if self.profile and self.profile.display_name:
            values.append(self.profile.display_name)
        return [value for value in values if value]

    def __repr__(self):
        return f"<AuthSession(status={self.status.value}, email={self.email!r}, timed_out={self.timed_out})>"


class GateDecision:
    def __init__(self, outcome: GateOutcome, location: Optional[str] = None):
        self.outcome = outcome
        self.location = location

    def __repr__(self):
        return f"<GateDecision({self.outcome.value}, location={self.location!r})>"


def evaluate_gate(session: AuthSession, required_role: Optional[UserRole] = None) -> GateDecision:
    if session.status == AuthStatus.CHECKING:
        return GateDecision(GateOutcome.WAITING)
    if session.status == AuthStatus.ANON:
        return GateDecision(GateOutcome.REDIRECT, login_redirect_url(session.requested_path))
    if not has_required_role(session.role, required_role):
        return GateDecision(GateOutcome.DENIED)
    return GateDecision(GateOutcome.RENDER)


async def resolve_session(
    access_token: Optional[str],
    requested_path: str,
    provider: Optional[SupabaseAuthService],
    db: Session
) -> AuthSession:
    """
    Settle a session for this request.

    Expired tokens are rejected locally. Otherwise the provider is asked who
    the token belongs to; if it does not answer in time the session stays
    CHECKING with timed_out set so the page can offer retry/reset.
    """
    session = AuthSession(requested_path)

    if provider is None:
        session.mark_anon(CONFIG_ERROR)
        return session

    if not access_token:
        session.mark_anon()
        return session

    if is_token_expired(access_token):
        session.mark_anon("Session expired. Please sign in again.")
        return session

    try:
        user = await provider.get_user(access_token)
    except AuthProviderTimeout as e:
        logger.warning(f"Session check timed out for {requested_path}")
        session.mark_timed_out(str(e))
        return session
    except AuthProviderError as e:
        logger.error(f"Session check failed: {e}")
        session.mark_anon(str(e))
        return session

    if user is None:
        session.mark_anon("Session expired. Please sign in again.")
        return session

    profile = app_user_crud.get_or_create(db, user)
    session.mark_authed(user, profile)
    return session
