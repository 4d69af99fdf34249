"""Google OAuth2 login endpoints"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse, RedirectResponse

from healthmoney.api.deps import (
    PRINCIPAL_SESSION_KEY,
    get_client_store,
    get_oauth,
    get_principal,
    get_security_config,
)
from healthmoney.core.security import SecurityConfig
from healthmoney.integrations.google_calendar.exceptions import OAuthError
from healthmoney.integrations.google_calendar.models import AuthorizedClient, Principal
from healthmoney.integrations.google_calendar.oauth import GoogleOAuth
from healthmoney.integrations.google_calendar.store import InMemoryAuthorizedClientStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

STATE_SESSION_KEY = "oauth2_state"


@router.get("/oauth2/authorization/google")
async def start_login(
    request: Request,
    oauth: GoogleOAuth = Depends(get_oauth),
) -> RedirectResponse:
    """
    Initiate the Google OAuth2 login

    Redirects the browser to Google's consent screen
    """
    state = secrets.token_urlsafe(24)
    request.session[STATE_SESSION_KEY] = state
    return RedirectResponse(oauth.get_authorization_url(state=state), status_code=302)


@router.get("/login/oauth2/code/google")
async def oauth_callback(
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    oauth: GoogleOAuth = Depends(get_oauth),
    store: InMemoryAuthorizedClientStore = Depends(get_client_store),
    security: SecurityConfig = Depends(get_security_config),
) -> RedirectResponse:
    """
    Google OAuth callback endpoint

    Exchanges the authorization code for tokens, records the authorized
    client and signs the user in
    """
    if error:
        logger.error(f"OAuth provider returned error: {error}")
        raise HTTPException(status_code=400, detail=f"Login failed: {error}")

    expected_state = request.session.pop(STATE_SESSION_KEY, None)
    if not code or not state or not expected_state or not secrets.compare_digest(state, expected_state):
        logger.warning("OAuth callback with missing code or mismatched state")
        raise HTTPException(status_code=400, detail="Invalid OAuth state")

    try:
        tokens = await oauth.exchange_code_for_tokens(code)
        user = await oauth.fetch_userinfo(tokens.access_token)
    except OAuthError as e:
        logger.error(f"OAuth callback failed: {e}")
        raise HTTPException(status_code=502, detail="Failed to process OAuth callback")

    store.save_authorized_client(
        AuthorizedClient(
            registration_id=oauth.registration_id,
            principal_name=user.sub,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=tokens.expires_in),
            scopes=tokens.scopes,
        )
    )

    principal = Principal(
        registration_id=oauth.registration_id,
        name=user.sub,
        email=user.email,
        display_name=user.name,
    )
    request.session[PRINCIPAL_SESSION_KEY] = principal.to_session()

    logger.info(f"Principal {principal.name} signed in")
    return RedirectResponse(security.default_success_url, status_code=302)


@router.get("/loginGoogle", response_class=PlainTextResponse)
async def login_success(principal: Optional[Principal] = Depends(get_principal)) -> str:
    """Landing page after a successful login"""
    if principal is None:
        return "Nenhum usuário logado."
    who = principal.display_name or principal.email or principal.name
    return f"Login realizado com sucesso! Bem-vindo, {who}."


@router.post("/logout", response_class=PlainTextResponse)
async def logout(
    request: Request,
    principal: Optional[Principal] = Depends(get_principal),
    store: InMemoryAuthorizedClientStore = Depends(get_client_store),
) -> str:
    """Forget the session and the tokens issued for it"""
    if principal is not None:
        store.remove_authorized_client(principal.registration_id, principal.name)
        logger.info(f"Principal {principal.name} signed out")
    request.session.clear()
    return "Logout realizado."
