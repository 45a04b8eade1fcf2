import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse

from showcase.api.deps import get_account_service, get_oauth_client
from showcase.auth.dependencies import get_current_account
from showcase.auth.github import GitHubOAuthClient
from showcase.auth.sessions import session_store
from showcase.auth.tokens import create_session_token, verify_token
from showcase.config import get_settings
from showcase.exceptions import AccountConflict, AuthenticationRequired, OAuthError
from showcase.schemas import AccountResponse, AuthContext
from showcase.services.accounts import AccountService

settings = get_settings()
logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])

STATE_COOKIE = "oauth_state"
STATE_TTL_SECONDS = 600


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=302)


@router.get("/login")
async def login(oauth: GitHubOAuthClient = Depends(get_oauth_client)):
    """Start the GitHub OAuth flow"""
    if not oauth.configured:
        return JSONResponse(
            status_code=503,
            content={
                "detail": "GitHub OAuth not configured. Please add GITHUB_CLIENT_ID "
                          "and GITHUB_CLIENT_SECRET environment variables."
            }
        )

    state = secrets.token_urlsafe(16)
    response = _redirect(oauth.authorize_url(state))
    response.set_cookie(
        STATE_COOKIE,
        state,
        max_age=STATE_TTL_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE
    )
    return response


@router.get("/auth/github/callback")
async def github_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    oauth: GitHubOAuthClient = Depends(get_oauth_client),
    accounts: AccountService = Depends(get_account_service)
):
    """Finish the OAuth flow: upsert the account and open a session"""
    if not oauth.configured:
        return _redirect("/?error=oauth_not_configured")

    expected_state = request.cookies.get(STATE_COOKIE)
    if not code or not state or not expected_state or not secrets.compare_digest(state, expected_state):
        logger.warning("OAuth callback rejected: missing code or state mismatch")
        return _redirect("/?error=oauth_failed")

    try:
        profile = await oauth.fetch_profile(code)
    except OAuthError:
        logger.exception("GitHub OAuth handshake failed")
        return _redirect("/?error=oauth_failed")

    try:
        account = await accounts.upsert(profile)
    except AccountConflict:
        return _redirect("/?error=oauth_failed")

    session_id = await session_store.create(account.id)
    token = create_session_token(account.id, session_id)

    response = _redirect("/")
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=settings.SESSION_TTL_SECONDS,
        httponly=True,
        samesite="lax",
        secure=settings.SESSION_COOKIE_SECURE
    )
    response.delete_cookie(STATE_COOKIE)

    logger.info(f"Account {account.id} logged in")
    return response


@router.get("/logout")
async def logout(request: Request):
    """End the current session, if any"""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    payload = verify_token(token) if token else None
    if payload is not None:
        await session_store.revoke(payload.sid)
        logger.info(f"Account {payload.sub} logged out")

    response = _redirect("/")
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response


@router.get("/auth/user", response_model=AccountResponse)
async def current_user(
    auth: AuthContext = Depends(get_current_account),
    accounts: AccountService = Depends(get_account_service)
):
    """
    Get the current account.
    Requires: authentication
    """
    account = await accounts.get(auth.account_id)
    if account is None:
        raise AuthenticationRequired("Account no longer exists")
    return account
