# healthmoney/main.py
import logging
from functools import partial
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from healthmoney.api.deps import CalendarFactory
from healthmoney.core.config import Settings
from healthmoney.core.log import configure_logging
from healthmoney.core.security import CSRFMiddleware, SecurityConfig
from healthmoney.integrations.google_calendar.client import GoogleCalendarClient
from healthmoney.integrations.google_calendar.oauth import GoogleOAuth
from healthmoney.integrations.google_calendar.store import InMemoryAuthorizedClientStore
from healthmoney.services.credentials import CredentialResolver

#Import Routers
from healthmoney.api.v1 import agenda
from healthmoney.api.v1.auth import google as google_auth

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    security: Optional[SecurityConfig] = None,
    client_store: Optional[InMemoryAuthorizedClientStore] = None,
    credential_resolver: Optional[CredentialResolver] = None,
    calendar_factory: Optional[CalendarFactory] = None,
    oauth: Optional[GoogleOAuth] = None,
) -> FastAPI:
    """
    Build the agenda API

    Every collaborator can be passed in; anything omitted is built from
    settings.
    """
    settings = settings or Settings.from_env()
    security = security or SecurityConfig.from_settings(settings)
    client_store = client_store or InMemoryAuthorizedClientStore(settings.encryption_key)
    credential_resolver = credential_resolver or CredentialResolver(client_store)
    calendar_factory = calendar_factory or partial(
        GoogleCalendarClient,
        application_name=settings.application_name,
        timezone=settings.calendar_timezone,
        utc_offset=settings.calendar_utc_offset,
        timeout=settings.google_api_timeout,
    )
    oauth = oauth or GoogleOAuth(
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        redirect_uri=settings.google_redirect_uri,
    )

    app = FastAPI(
        title="HealthMoney Agenda API",
        description="Create and delete events on the user's Google Calendar",
        version="1.0.0",
    )

    app.state.settings = settings
    app.state.security = security
    app.state.client_store = client_store
    app.state.credential_resolver = credential_resolver
    app.state.calendar_factory = calendar_factory
    app.state.oauth = oauth

    # Middleware added last runs first: sessions wrap CSRF which wraps CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if security.csrf_enabled:
        # The provider redirects straight to the callback, it cannot carry a token
        app.add_middleware(CSRFMiddleware, exempt_paths=("/login/oauth2/",))
    else:
        logger.warning("CSRF protection is disabled")
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret_key,
        same_site="lax",
        https_only=settings.app_env == "production",
    )

    #Include routers
    app.include_router(agenda.router)
    app.include_router(google_auth.router)

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": "HealthMoney Agenda API",
            "version": "1.0.0",
            "status": "running"
        }

    @app.get("/health")
    async def health():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "environment": settings.app_env
        }

    return app


def build_app() -> FastAPI:
    """Entry point for uvicorn --factory"""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    return create_app(settings)


if __name__ == "__main__":
    import uvicorn
    settings = Settings.from_env()
    uvicorn.run(
        "healthmoney.main:build_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        reload=True
    )
