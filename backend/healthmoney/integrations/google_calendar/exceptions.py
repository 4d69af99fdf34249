"""Google Calendar integration exceptions"""

from typing import Optional


class AuthError(Exception):
    """Base exception for authentication problems"""

    pass


class AuthorizedClientNotFound(AuthError):
    """Raised when no OAuth2 authorized client is on file for a principal"""

    def __init__(self, registration_id: Optional[str] = None, principal_name: Optional[str] = None):
        self.registration_id = registration_id
        self.principal_name = principal_name
        if principal_name is None:
            message = "No authenticated principal in session"
        else:
            message = (
                f"No authorized client found for principal '{principal_name}' "
                f"(registration '{registration_id}')"
            )
        super().__init__(message)


class OAuthError(AuthError):
    """Raised when the OAuth2 provider rejects a token exchange or userinfo call"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class CalendarApiError(Exception):
    """Raised when a Google Calendar API call fails"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
    ):
        self.status_code = status_code
        self.reason = reason
        super().__init__(message)
