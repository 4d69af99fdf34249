"""HTTP security configuration for the agenda backend"""

import logging
import secrets
from dataclasses import dataclass

from fastapi import Request
from fastapi.responses import PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware

from healthmoney.core.config import Settings

logger = logging.getLogger(__name__)

CSRF_COOKIE_NAME = "XSRF-TOKEN"
CSRF_HEADER_NAME = "X-XSRF-TOKEN"
SAFE_METHODS = {"GET", "HEAD", "OPTIONS", "TRACE"}


@dataclass(frozen=True)
class SecurityConfig:
    """
    Security posture handed to create_app

    csrf_enabled: enforce a double-submit CSRF token on unsafe methods
    default_success_url: where the OAuth2 callback always redirects to
    require_login_for_delete: apply the create endpoint's login guard to delete
    strict_status_codes: answer failures with 4xx/5xx instead of 200
    """

    csrf_enabled: bool = False
    default_success_url: str = "/loginGoogle"
    require_login_for_delete: bool = False
    strict_status_codes: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "SecurityConfig":
        return cls(
            csrf_enabled=settings.csrf_enabled,
            default_success_url=settings.login_success_url,
            require_login_for_delete=settings.require_login_for_delete,
            strict_status_codes=settings.strict_status_codes,
        )


class CSRFMiddleware(BaseHTTPMiddleware):
    """
    Double-submit cookie CSRF protection

    Every response carries an XSRF-TOKEN cookie; requests with unsafe methods
    must echo its value in the X-XSRF-TOKEN header.
    """

    def __init__(self, app, exempt_paths: tuple[str, ...] = ()):
        super().__init__(app)
        self.exempt_paths = exempt_paths

    async def dispatch(self, request: Request, call_next):
        cookie_token = request.cookies.get(CSRF_COOKIE_NAME)

        if request.method not in SAFE_METHODS and not request.url.path.startswith(self.exempt_paths):
            header_token = request.headers.get(CSRF_HEADER_NAME)
            if not cookie_token or not header_token or not secrets.compare_digest(
                cookie_token, header_token
            ):
                logger.warning(f"CSRF token missing or invalid for {request.method} {request.url.path}")
                return PlainTextResponse("Invalid CSRF token", status_code=403)

        response = await call_next(request)

        if not cookie_token:
            response.set_cookie(CSRF_COOKIE_NAME, secrets.token_urlsafe(32), samesite="lax")
        return response
