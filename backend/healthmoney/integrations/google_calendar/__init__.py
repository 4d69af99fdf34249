"""Google Calendar Integration"""

from .client import GoogleCalendarClient
from .exceptions import AuthError, AuthorizedClientNotFound, CalendarApiError, OAuthError
from .models import AuthorizedClient, CalendarEvent, EventoRequest, Principal
from .oauth import GoogleOAuth
from .store import InMemoryAuthorizedClientStore

__all__ = [
    "AuthError",
    "AuthorizedClient",
    "AuthorizedClientNotFound",
    "CalendarApiError",
    "CalendarEvent",
    "EventoRequest",
    "GoogleCalendarClient",
    "GoogleOAuth",
    "InMemoryAuthorizedClientStore",
    "OAuthError",
    "Principal",
]
