from datetime import timedelta
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from showcase.auth.github import AUTHORIZE_URL, GitHubOAuthClient, profile_from_github
from showcase.auth.sessions import SessionStore
from showcase.auth.tokens import create_session_token, verify_token
from showcase.exceptions import OAuthError


class FakeRedis:
    """Just enough of the Redis client for the session store"""

    def __init__(self):
        self.data = {}
        self.ttls = {}

    async def setex(self, key, ttl, value):
        self.data[key] = value
        self.ttls[key] = ttl

    async def get(self, key):
        return self.data.get(key)

    async def delete(self, *keys):
        for key in keys:
            self.data.pop(key, None)


def github_transport(token_payload=None, user=None, emails=None, emails_status=200):
    token_payload = token_payload if token_payload is not None else {"access_token": "gho_test"}
    user = user or {
        "id": 583231,
        "login": "octocat",
        "name": "Mona Lisa Octocat",
        "avatar_url": "https://avatars.githubusercontent.com/u/583231",
    }
    emails = emails if emails is not None else [
        {"email": "secondary@github.com", "primary": False},
        {"email": "octocat@github.com", "primary": True},
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/login/oauth/access_token":
            return httpx.Response(200, json=token_payload)
        if request.url.path == "/user":
            assert request.headers["Authorization"] == "Bearer gho_test"
            return httpx.Response(200, json=user)
        if request.url.path == "/user/emails":
            return httpx.Response(emails_status, json=emails)
        return httpx.Response(404)

    return httpx.MockTransport(handler)


class TestSessionTokens:
    def test_round_trip(self):
        token = create_session_token("42", "session-1")

        payload = verify_token(token)

        assert payload.sub == "42"
        assert payload.sid == "session-1"

    def test_expired_token(self):
        token = create_session_token("42", "session-1", expires_delta=timedelta(seconds=-1))

        assert verify_token(token) is None

    def test_tampered_token(self):
        token = create_session_token("42", "session-1")

        assert verify_token(token[:-2] + "xx") is None
        assert verify_token("not-a-token") is None


class TestSessionStore:
    def _store(self) -> SessionStore:
        store = SessionStore()
        store.enabled = True
        store.redis = FakeRedis()
        return store

    async def test_create_and_check(self):
        store = self._store()

        session_id = await store.create("42")

        assert await store.is_active(session_id, "42") is True
        assert await store.is_active(session_id, "43") is False
        assert store.redis.ttls[f"session:{session_id}"] == store.ttl

    async def test_revoked_session_is_inactive(self):
        store = self._store()
        session_id = await store.create("42")

        await store.revoke(session_id)

        assert await store.is_active(session_id, "42") is False

    async def test_disconnected_store_rejects_sessions(self):
        store = SessionStore()
        store.enabled = True
        store.redis = None

        assert await store.is_active("any", "42") is False

    async def test_disabled_store_trusts_token(self):
        store = SessionStore()
        store.enabled = False

        session_id = await store.create("42")

        assert session_id
        assert await store.is_active(session_id, "42") is True


class TestGitHubProfile:
    def test_primary_email_and_name_split(self):
        profile = profile_from_github(
            {"id": 7, "login": "octo", "name": "Mona Lisa Octocat", "avatar_url": "https://a/7"},
            [{"email": "x@y.z", "primary": False}, {"email": "mona@y.z", "primary": True}]
        )

        assert profile.id == "7"
        assert profile.email == "mona@y.z"
        assert profile.first_name == "Mona"
        assert profile.last_name == "Lisa Octocat"
        assert profile.profile_image_url == "https://a/7"

    def test_login_used_when_name_missing(self):
        profile = profile_from_github({"id": 7, "login": "octo", "name": None}, [])

        assert profile.first_name == "octo"
        assert profile.last_name is None
        assert profile.email is None

    def test_first_email_without_primary(self):
        profile = profile_from_github({"id": 7, "login": "octo"}, [{"email": "only@y.z"}])

        assert profile.email == "only@y.z"


class TestGitHubOAuthClient:
    def test_authorize_url(self):
        client = GitHubOAuthClient("cid", "secret", "https://app.test/callback")

        url = client.authorize_url("state-123")

        assert url.startswith(AUTHORIZE_URL)
        query = parse_qs(urlparse(url).query)
        assert query["client_id"] == ["cid"]
        assert query["state"] == ["state-123"]
        assert query["scope"] == ["user:email"]
        assert query["redirect_uri"] == ["https://app.test/callback"]

    def test_configured(self):
        assert GitHubOAuthClient("cid", "secret").configured is True
        assert GitHubOAuthClient("", "").configured is False

    async def test_fetch_profile(self):
        client = GitHubOAuthClient("cid", "secret", transport=github_transport())

        profile = await client.fetch_profile("code-1")

        assert profile.id == "583231"
        assert profile.email == "octocat@github.com"
        assert profile.first_name == "Mona"

    async def test_emails_endpoint_refused(self):
        client = GitHubOAuthClient(
            "cid", "secret",
            transport=github_transport(emails_status=403, emails={"message": "forbidden"})
        )

        profile = await client.fetch_profile("code-1")

        assert profile.email is None

    async def test_code_exchange_error(self):
        client = GitHubOAuthClient(
            "cid", "secret",
            transport=github_transport(token_payload={"error": "bad_verification_code"})
        )

        with pytest.raises(OAuthError):
            await client.fetch_profile("expired")
