"""
Dashboard sign-in and sign-out.

Credentials go straight to the auth provider; the access token it returns is
kept in an httponly cookie:
- GET /login: sign-in form (already signed-in users go to the dashboard)
- POST /login: password sign-in, or email a one-time code when no password is given
- POST /login/verify: trade the emailed code for a session
- POST /logout: revoke the session and clear the cookie
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError as PydanticValidationError

from jobtracker.core.config import settings
from jobtracker.core.deps import get_auth_service, get_auth_session
from jobtracker.core.security import clear_session_cookie, set_session_cookie
from jobtracker.dashboard.session import CONFIG_ERROR, AuthSession, AuthStatus, safe_next_path
from jobtracker.dashboard.views import render_login
from jobtracker.schemas.user import LoginRequest, SessionTokens
from jobtracker.services.auth_provider import AuthProviderError, SupabaseAuthService

router = APIRouter(tags=["Dashboard Auth"])
logger = logging.getLogger(__name__)


def _signed_in_redirect(tokens: SessionTokens, next_path: str) -> RedirectResponse:
    response = RedirectResponse(url=next_path, status_code=303)
    set_session_cookie(response, tokens.access_token, max_age=tokens.expires_in)
    return response


@router.get("/login", response_class=HTMLResponse)
async def login_page(
    next: Optional[str] = None,
    session: AuthSession = Depends(get_auth_session)
):
    next_path = safe_next_path(next)
    if session.status == AuthStatus.AUTHED:
        return RedirectResponse(url=next_path, status_code=303)
    return render_login(next_path, error=session.error)


@router.post("/login", response_class=HTMLResponse)
async def login(
    email: str = Form(""),
    password: str = Form(""),
    next: str = Form("/dashboard"),
    provider: Optional[SupabaseAuthService] = Depends(get_auth_service)
):
    next_path = safe_next_path(next)
    if provider is None:
        return render_login(next_path, error=CONFIG_ERROR, email=email, status_code=503)

    try:
        form = LoginRequest(email=email.strip().lower(), password=password or None, next=next_path)
    except PydanticValidationError:
        return render_login(next_path, error="Enter a valid email address to continue.", email=email, status_code=400)

    if form.password:
        try:
            tokens = await provider.sign_in_with_password(form.email, form.password)
        except AuthProviderError as e:
            return render_login(next_path, error=str(e), email=form.email, status_code=400)
        logger.info(f"Password sign-in for {form.email}")
        return _signed_in_redirect(tokens, next_path)

    try:
        await provider.send_email_code(form.email)
    except AuthProviderError as e:
        return render_login(next_path, error=str(e), email=form.email, status_code=400)

    return render_login(
        next_path,
        message="Check your email for a sign-in code. The message expires in 5 minutes.",
        email=form.email,
        code_sent=True,
    )


@router.post("/login/verify", response_class=HTMLResponse)
async def verify_login_code(
    email: str = Form(""),
    code: str = Form(""),
    next: str = Form("/dashboard"),
    provider: Optional[SupabaseAuthService] = Depends(get_auth_service)
):
    next_path = safe_next_path(next)
    if provider is None:
        return render_login(next_path, error=CONFIG_ERROR, email=email, status_code=503)

    if not email.strip() or not code.strip():
        return render_login(next_path, error="Enter the code from your email.", email=email, code_sent=True, status_code=400)

    try:
        tokens = await provider.verify_email_code(email, code)
    except AuthProviderError as e:
        return render_login(next_path, error=str(e), email=email, code_sent=True, status_code=400)

    logger.info(f"Code sign-in for {email.strip().lower()}")
    return _signed_in_redirect(tokens, next_path)


@router.post("/logout")
async def logout(
    request: Request,
    provider: Optional[SupabaseAuthService] = Depends(get_auth_service)
):
    """
    Sign out. Also the "reset session" action on the timed-out check page,
    so it must work even when the provider does not answer.
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if token and provider is not None:
        try:
            await provider.sign_out(token)
        except AuthProviderError as e:
            logger.warning(f"Provider sign-out failed, clearing cookie anyway: {e}")

    response = RedirectResponse(url="/login", status_code=303)
    clear_session_cookie(response)
    return response
