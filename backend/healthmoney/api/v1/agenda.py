"""Agenda endpoints: create, delete and list events on the user's Google Calendar"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, PlainTextResponse

from healthmoney.api.deps import (
    CalendarFactory,
    get_calendar_factory,
    get_credential_resolver,
    get_principal,
    get_security_config,
)
from healthmoney.core.security import SecurityConfig
from healthmoney.integrations.google_calendar.exceptions import AuthError, CalendarApiError
from healthmoney.integrations.google_calendar.models import EventoRequest, Principal
from healthmoney.services.credentials import CredentialResolver

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/agenda", tags=["agenda"])

NOT_LOGGED_IN_MESSAGE = (
    "⛔ ERRO: Você não está logado ou seu Cookie expirou. Faça login novamente no navegador."
)


def _failure_status(error: Exception, security: SecurityConfig) -> int:
    """HTTP status for a failed operation"""
    if not security.strict_status_codes:
        return 200
    if isinstance(error, AuthError):
        return 401
    if isinstance(error, CalendarApiError):
        if error.status_code is not None and 400 <= error.status_code < 500:
            return error.status_code
        return 502
    return 500


def _not_logged_in(security: SecurityConfig) -> PlainTextResponse:
    status_code = 401 if security.strict_status_codes else 200
    return PlainTextResponse(NOT_LOGGED_IN_MESSAGE, status_code=status_code)


@router.post("/criar", response_class=PlainTextResponse)
async def criar_evento(
    evento: EventoRequest,
    principal: Optional[Principal] = Depends(get_principal),
    security: SecurityConfig = Depends(get_security_config),
    resolver: CredentialResolver = Depends(get_credential_resolver),
    calendar_factory: CalendarFactory = Depends(get_calendar_factory),
) -> PlainTextResponse:
    """Create an event on the signed-in user's primary calendar"""
    if principal is None:
        return _not_logged_in(security)

    try:
        access_token = resolver.resolve_access_token(principal)
        event_id = await calendar_factory(access_token).create_event(evento)
        return PlainTextResponse(f"✅ Evento criado com sucesso! ID: {event_id}")
    except Exception as e:
        logger.exception(f"Failed to create event for principal {principal.name}")
        return PlainTextResponse(
            f"Erro ao criar evento: {e}",
            status_code=_failure_status(e, security),
        )


@router.delete("/deletar/{id}", response_class=PlainTextResponse)
async def deletar_evento(
    id: str,
    principal: Optional[Principal] = Depends(get_principal),
    security: SecurityConfig = Depends(get_security_config),
    resolver: CredentialResolver = Depends(get_credential_resolver),
    calendar_factory: CalendarFactory = Depends(get_calendar_factory),
) -> PlainTextResponse:
    """Delete an event from the signed-in user's primary calendar"""
    if principal is None and security.require_login_for_delete:
        return _not_logged_in(security)

    try:
        access_token = resolver.resolve_access_token(principal)
        await calendar_factory(access_token).delete_event(id)
        return PlainTextResponse(f"Evento {id} removido com sucesso.")
    except Exception as e:
        logger.exception(f"Failed to delete event {id}")
        return PlainTextResponse(
            f"Erro ao remover evento: {e}",
            status_code=_failure_status(e, security),
        )


@router.get("/listar")
async def listar_eventos(
    principal: Optional[Principal] = Depends(get_principal),
    resolver: CredentialResolver = Depends(get_credential_resolver),
    calendar_factory: CalendarFactory = Depends(get_calendar_factory),
    desde: Optional[datetime] = None,
    limite: int = Query(250, ge=1, le=2500),
):
    """List events on the signed-in user's primary calendar

    The dashboard sends the user back to the login page on 401.
    """
    if principal is None:
        return JSONResponse({"detail": "Not logged in"}, status_code=401)

    try:
        access_token = resolver.resolve_access_token(principal)
    except AuthError as e:
        logger.warning(f"Cannot list events: {e}")
        return JSONResponse({"detail": str(e)}, status_code=401)

    if desde is not None and desde.tzinfo is None:
        desde = desde.replace(tzinfo=timezone.utc)

    try:
        events = await calendar_factory(access_token).list_events(time_min=desde, max_results=limite)
    except CalendarApiError as e:
        logger.exception(f"Failed to list events for principal {principal.name}")
        status_code = 401 if e.status_code == 401 else 502
        return JSONResponse({"detail": str(e)}, status_code=status_code)

    return [event.to_dict() for event in events]
