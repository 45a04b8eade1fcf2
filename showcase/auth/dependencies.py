from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from showcase.auth.sessions import session_store
from showcase.auth.tokens import verify_token
from showcase.config import get_settings
from showcase.database import get_db
from showcase.exceptions import AuthenticationRequired
from showcase.schemas import AuthContext
from showcase.services.accounts import AccountService
from showcase.services.admin import AdminGate

settings = get_settings()
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_account(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
) -> AuthContext:
    """Resolve the caller from the session cookie or a bearer token"""
    token = credentials.credentials if credentials else request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise AuthenticationRequired()

    payload = verify_token(token)
    if payload is None:
        raise AuthenticationRequired("Invalid session token")

    if not await session_store.is_active(payload.sid, payload.sub):
        raise AuthenticationRequired("Session expired")

    account = await AccountService(db).get(payload.sub)
    if account is None:
        raise AuthenticationRequired("Account no longer exists")

    auth_context = AuthContext(
        account_id=account.id,
        session_id=payload.sid,
        email=account.email,
        is_admin=account.is_admin
    )

    # Store in request state for access in handlers
    request.state.auth = auth_context

    return auth_context


class RequireAdmin:
    """Dependency for admin-only endpoints"""

    async def __call__(
        self,
        auth: AuthContext = Depends(get_current_account),
        db: AsyncSession = Depends(get_db)
    ) -> AuthContext:
        await AdminGate(db).require_admin(auth.account_id)
        return auth


# Convenient dependency instances
require_admin = RequireAdmin()
