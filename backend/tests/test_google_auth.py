"""Tests for the Google OAuth2 login flow."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from urllib.parse import parse_qs, urlparse

import aiohttp
import pytest

from conftest import FailingSession, FakeResponse, FakeSession
from healthmoney.core.security import SecurityConfig
from healthmoney.integrations.google_calendar.exceptions import OAuthError
from healthmoney.integrations.google_calendar.oauth import TOKEN_URL, USERINFO_URL, GoogleOAuth
from healthmoney.integrations.google_calendar.store import InMemoryAuthorizedClientStore

pytestmark = pytest.mark.unit

EVENTO = {
    "titulo": "Consulta",
    "dataInicio": "2023-12-25T10:00:00",
    "dataFim": "2023-12-25T11:00:00",
    "descricao": "Retorno",
}


def _oauth(session: FakeSession) -> GoogleOAuth:
    return GoogleOAuth(
        client_id="test-client-id",
        client_secret="test-client-secret",
        redirect_uri="http://testserver/login/oauth2/code/google",
        session_factory=session,
    )


def _provider_responses() -> list[FakeResponse]:
    return [
        FakeResponse(
            200,
            {
                "access_token": "ya29.fresh",
                "refresh_token": "1//refresh",
                "expires_in": 3599,
                "scope": "openid https://www.googleapis.com/auth/calendar",
            },
        ),
        FakeResponse(200, {"sub": "108234", "email": "ana@example.com", "name": "Ana"}),
    ]


class TestGoogleOAuth:
    def test_authorization_url(self):
        url = _oauth(FakeSession([])).get_authorization_url(state="xyz")

        parsed = urlparse(url)
        params = parse_qs(parsed.query)
        assert parsed.netloc == "accounts.google.com"
        assert params["state"] == ["xyz"]
        assert params["response_type"] == ["code"]
        assert "https://www.googleapis.com/auth/calendar" in params["scope"][0].split()

    async def test_exchange_code(self):
        session = FakeSession(_provider_responses()[:1])

        tokens = await _oauth(session).exchange_code_for_tokens("auth-code")

        assert tokens.access_token == "ya29.fresh"
        assert tokens.refresh_token == "1//refresh"
        assert tokens.scopes == ("openid", "https://www.googleapis.com/auth/calendar")
        assert session.calls[0]["url"] == TOKEN_URL
        assert session.calls[0]["data"]["grant_type"] == "authorization_code"

    @pytest.mark.parametrize(
        "error", [aiohttp.ClientConnectionError("dns failure"), asyncio.TimeoutError()]
    )
    async def test_exchange_transport_failure(self, error):
        with pytest.raises(OAuthError, match="Token exchange request failed") as exc_info:
            await _oauth(FailingSession(error)).exchange_code_for_tokens("auth-code")

        assert exc_info.value.__cause__ is error

    @pytest.mark.parametrize(
        "error", [aiohttp.ClientConnectionError("dns failure"), asyncio.TimeoutError()]
    )
    async def test_userinfo_transport_failure(self, error):
        with pytest.raises(OAuthError, match="Userinfo request failed"):
            await _oauth(FailingSession(error)).fetch_userinfo("ya29.fresh")

    async def test_exchange_rejected(self):
        session = FakeSession([FakeResponse(400, "invalid_grant", reason="Bad Request")])

        with pytest.raises(OAuthError, match="400"):
            await _oauth(session).exchange_code_for_tokens("bad-code")

    async def test_userinfo(self):
        session = FakeSession(_provider_responses()[1:])

        user = await _oauth(session).fetch_userinfo("ya29.fresh")

        assert user.sub == "108234"
        assert session.calls[0]["url"] == USERINFO_URL
        assert session.calls[0]["headers"]["Authorization"] == "Bearer ya29.fresh"


class TestLoginFlow:
    def _login(self, client) -> str:
        response = client.get("/oauth2/authorization/google", follow_redirects=False)
        assert response.status_code == 302
        return parse_qs(urlparse(response.headers["location"]).query)["state"][0]

    def test_login_then_create_event(self, make_client, calendar, calendar_factory):
        store = InMemoryAuthorizedClientStore()
        client = make_client(
            logged_in=False,
            client_store=store,
            oauth=_oauth(FakeSession(_provider_responses())),
        )

        state = self._login(client)
        response = client.get(
            "/login/oauth2/code/google",
            params={"code": "auth-code", "state": state},
            follow_redirects=False,
        )

        assert response.status_code == 302
        assert response.headers["location"] == "/loginGoogle"
        assert store.load_authorized_client("google", "108234").access_token == "ya29.fresh"
        assert client.get("/loginGoogle").text == "Login realizado com sucesso! Bem-vindo, Ana."

        created = client.post("/agenda/criar", json=EVENTO)

        assert created.text == "✅ Evento criado com sucesso! ID: evt_abc123"
        calendar_factory.assert_called_once_with("ya29.fresh")

    def test_custom_success_url(self, make_client):
        client = make_client(
            security=SecurityConfig(default_success_url="/dashboard"),
            logged_in=False,
            client_store=InMemoryAuthorizedClientStore(),
            oauth=_oauth(FakeSession(_provider_responses())),
        )

        state = self._login(client)
        response = client.get(
            "/login/oauth2/code/google",
            params={"code": "auth-code", "state": state},
            follow_redirects=False,
        )

        assert response.headers["location"] == "/dashboard"

    def test_state_mismatch_is_rejected(self, make_client):
        session = FakeSession(_provider_responses())
        client = make_client(logged_in=False, oauth=_oauth(session))

        self._login(client)
        response = client.get(
            "/login/oauth2/code/google",
            params={"code": "auth-code", "state": "forged"},
            follow_redirects=False,
        )

        assert response.status_code == 400
        assert session.calls == []

    def test_network_failure_is_bad_gateway(self, make_client):
        session = FailingSession(aiohttp.ClientConnectionError("dns failure"))
        store = InMemoryAuthorizedClientStore()
        client = make_client(logged_in=False, client_store=store, oauth=_oauth(session))

        state = self._login(client)
        response = client.get(
            "/login/oauth2/code/google",
            params={"code": "auth-code", "state": state},
            follow_redirects=False,
        )

        assert response.status_code == 502
        assert session.calls[0]["url"] == TOKEN_URL
        assert store.load_authorized_client("google", "108234") is None

    def test_token_expiry_is_timezone_aware(self, make_client):
        store = InMemoryAuthorizedClientStore()
        client = make_client(
            logged_in=False,
            client_store=store,
            oauth=_oauth(FakeSession(_provider_responses())),
        )

        state = self._login(client)
        client.get(
            "/login/oauth2/code/google",
            params={"code": "auth-code", "state": state},
            follow_redirects=False,
        )

        expires_at = store.load_authorized_client("google", "108234").expires_at
        assert expires_at.tzinfo is not None
        assert expires_at > datetime.now(timezone.utc)

    def test_provider_failure_is_bad_gateway(self, make_client):
        client = make_client(
            logged_in=False,
            oauth=_oauth(FakeSession([FakeResponse(500, "boom", reason="Internal Server Error")])),
        )

        state = self._login(client)
        response = client.get(
            "/login/oauth2/code/google",
            params={"code": "auth-code", "state": state},
            follow_redirects=False,
        )

        assert response.status_code == 502

    def test_logout_forgets_tokens(self, make_client):
        store = InMemoryAuthorizedClientStore()
        client = make_client(
            logged_in=False,
            client_store=store,
            oauth=_oauth(FakeSession(_provider_responses())),
        )
        state = self._login(client)
        client.get(
            "/login/oauth2/code/google",
            params={"code": "auth-code", "state": state},
            follow_redirects=False,
        )

        assert client.post("/logout").text == "Logout realizado."
        assert store.load_authorized_client("google", "108234") is None
        assert client.get("/loginGoogle").text == "Nenhum usuário logado."
