from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from showcase.config import get_settings
from showcase.schemas import TokenPayload

settings = get_settings()


def create_session_token(
    account_id: str,
    session_id: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Sign a session token for a logged-in account.
    `sid` ties the token to an entry in the session store so logout can revoke it.
    """
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(seconds=settings.SESSION_TTL_SECONDS)

    claims = {
        "sub": account_id,
        "sid": session_id,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[TokenPayload]:
    """Decode a session token; None if the signature, expiry or claims are bad"""
    try:
        claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    try:
        return TokenPayload(**claims)
    except ValueError:
        # Signed by us but missing sub/sid
        return None
