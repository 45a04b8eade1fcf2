from showcase.auth.dependencies import get_current_account, require_admin
from showcase.auth.github import GitHubOAuthClient, profile_from_github
from showcase.auth.sessions import session_store
from showcase.auth.tokens import create_session_token, verify_token

__all__ = [
    "get_current_account",
    "require_admin",
    "GitHubOAuthClient",
    "profile_from_github",
    "session_store",
    "create_session_token",
    "verify_token",
]
