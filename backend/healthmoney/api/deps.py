"""FastAPI dependencies backed by the objects create_app puts on app.state"""

from typing import Callable, Optional

from fastapi import Request

from healthmoney.core.security import SecurityConfig
from healthmoney.integrations.google_calendar.client import GoogleCalendarClient
from healthmoney.integrations.google_calendar.models import Principal
from healthmoney.integrations.google_calendar.oauth import GoogleOAuth
from healthmoney.integrations.google_calendar.store import InMemoryAuthorizedClientStore
from healthmoney.services.credentials import CredentialResolver

PRINCIPAL_SESSION_KEY = "principal"

CalendarFactory = Callable[[str], GoogleCalendarClient]


def get_principal(request: Request) -> Optional[Principal]:
    """The signed-in user, or None when the session carries no login"""
    return Principal.from_session(request.session.get(PRINCIPAL_SESSION_KEY))


def get_security_config(request: Request) -> SecurityConfig:
    return request.app.state.security


def get_credential_resolver(request: Request) -> CredentialResolver:
    return request.app.state.credential_resolver


def get_calendar_factory(request: Request) -> CalendarFactory:
    return request.app.state.calendar_factory


def get_oauth(request: Request) -> GoogleOAuth:
    return request.app.state.oauth


def get_client_store(request: Request) -> InMemoryAuthorizedClientStore:
    return request.app.state.client_store
