"""Shared fakes and fixtures for the agenda backend tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from healthmoney.api.deps import get_principal
from healthmoney.core.config import Settings
from healthmoney.core.security import SecurityConfig
from healthmoney.integrations.google_calendar.models import AuthorizedClient, Principal
from healthmoney.integrations.google_calendar.store import InMemoryAuthorizedClientStore
from healthmoney.main import create_app

PRINCIPAL = Principal(registration_id="google", name="108234", email="ana@example.com")
ACCESS_TOKEN = "ya29.test-access-token"


# ---------------------------------------------------------------------------
# Fake aiohttp session
# ---------------------------------------------------------------------------


class FakeResponse:
    def __init__(self, status: int = 200, body: Any = None, reason: str = "OK"):
        self.status = status
        self.reason = reason
        self._body = body

    async def json(self, content_type: Any = "application/json") -> Any:
        return self._body

    async def text(self) -> str:
        return "" if self._body is None else str(self._body)

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class FakeSession:
    """Records every request and answers from a queue of FakeResponses."""

    def __init__(self, responses: list[FakeResponse]):
        self.responses = responses
        self.calls: list[dict[str, Any]] = []
        self.init_kwargs: list[dict[str, Any]] = []

    def __call__(self, **kwargs: Any) -> "FakeSession":
        # Used as the session factory
        self.init_kwargs.append(kwargs)
        return self

    async def __aenter__(self) -> "FakeSession":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        return self.responses.pop(0)

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self.request("POST", url, **kwargs)


class FailingSession(FakeSession):
    """Raises the given exception on every request, after recording it."""

    def __init__(self, error: BaseException):
        super().__init__([])
        self.error = error

    def request(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append({"method": method, "url": url, **kwargs})
        raise self.error


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(
        google_client_id="test-client-id.apps.googleusercontent.com",
        google_client_secret="test-client-secret",
        session_secret_key="test-session-secret",
    )


@pytest.fixture
def client_store() -> InMemoryAuthorizedClientStore:
    store = InMemoryAuthorizedClientStore()
    store.save_authorized_client(
        AuthorizedClient(
            registration_id=PRINCIPAL.registration_id,
            principal_name=PRINCIPAL.name,
            access_token=ACCESS_TOKEN,
        )
    )
    return store


@pytest.fixture
def calendar() -> MagicMock:
    """Stand-in for GoogleCalendarClient."""
    fake = MagicMock()
    fake.create_event = AsyncMock(return_value="evt_abc123")
    fake.delete_event = AsyncMock(return_value=None)
    fake.list_events = AsyncMock(return_value=[])
    return fake


@pytest.fixture
def calendar_factory(calendar: MagicMock) -> MagicMock:
    return MagicMock(return_value=calendar)


@pytest.fixture
def make_client(settings, client_store, calendar_factory):
    """Build a TestClient; logged_in=True injects PRINCIPAL into every request."""

    def _make(
        security: SecurityConfig | None = None,
        logged_in: bool = True,
        **overrides: Any,
    ) -> TestClient:
        app = create_app(
            settings=settings,
            security=security or SecurityConfig(),
            client_store=overrides.pop("client_store", client_store),
            calendar_factory=overrides.pop("calendar_factory", calendar_factory),
            **overrides,
        )
        if logged_in:
            app.dependency_overrides[get_principal] = lambda: PRINCIPAL
        return TestClient(app)

    return _make
