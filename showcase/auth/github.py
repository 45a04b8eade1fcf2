from typing import List, Optional
from urllib.parse import urlencode

import httpx

from showcase.config import get_settings
from showcase.exceptions import OAuthError
from showcase.schemas import AccountProfile

settings = get_settings()

AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
TOKEN_URL = "https://github.com/login/oauth/access_token"
API_URL = "https://api.github.com"
SCOPE = "user:email"


def profile_from_github(user: dict, emails: List[dict]) -> AccountProfile:
    """Map a GitHub user (and their email list) to account fields"""
    email = next((e.get("email") for e in emails if e.get("primary")), None)
    if email is None and emails:
        email = emails[0].get("email")
    if email is None:
        email = user.get("email")

    name_parts = (user.get("name") or "").split()
    first_name = name_parts[0] if name_parts else user.get("login")
    last_name = " ".join(name_parts[1:]) or None

    return AccountProfile(
        id=str(user["id"]),
        email=email,
        first_name=first_name,
        last_name=last_name,
        profile_image_url=user.get("avatar_url"),
    )


class GitHubOAuthClient:
    """Authorization-code flow against GitHub"""

    def __init__(
        self,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.client_id = client_id if client_id is not None else settings.GITHUB_CLIENT_ID
        self.client_secret = client_secret if client_secret is not None else settings.GITHUB_CLIENT_SECRET
        self.redirect_uri = redirect_uri or settings.OAUTH_CALLBACK_URL
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def authorize_url(self, state: str) -> str:
        query = urlencode({
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": SCOPE,
            "state": state,
        })
        return f"{AUTHORIZE_URL}?{query}"

    async def fetch_profile(self, code: str) -> AccountProfile:
        """Exchange the callback code and load the user's profile"""
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=10.0) as client:
                access_token = await self._exchange_code(client, code)
                headers = {
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/vnd.github+json",
                }

                user_response = await client.get(f"{API_URL}/user", headers=headers)
                user_response.raise_for_status()

                # Private emails need the user:email scope; tolerate its absence
                emails_response = await client.get(f"{API_URL}/user/emails", headers=headers)
                emails = emails_response.json() if emails_response.status_code == 200 else []
        except httpx.HTTPError as exc:
            raise OAuthError(f"GitHub request failed: {exc}") from exc

        return profile_from_github(user_response.json(), emails)

    async def _exchange_code(self, client: httpx.AsyncClient, code: str) -> str:
        response = await client.post(
            TOKEN_URL,
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "code": code,
                "redirect_uri": self.redirect_uri,
            },
            headers={"Accept": "application/json"},
        )
        response.raise_for_status()

        payload = response.json()
        access_token = payload.get("access_token")
        if not access_token:
            raise OAuthError(payload.get("error_description") or "No access token returned")
        return access_token
