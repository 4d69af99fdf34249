"""
Google Calendar API client

Thin wrapper over the Calendar v3 REST API. One client is built per
request from the caller's bearer token and always targets a single
calendar ("primary" unless told otherwise).
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Optional
from urllib.parse import quote

import aiohttp

from healthmoney.integrations.google_calendar.exceptions import CalendarApiError
from healthmoney.integrations.google_calendar.models import CalendarEvent, EventoRequest

logger = logging.getLogger(__name__)

BASE_URL = "https://www.googleapis.com/calendar/v3"


class GoogleCalendarClient:
    """Bearer-token client for one Google calendar"""

    def __init__(
        self,
        access_token: str,
        application_name: str = "HealthMoney",
        calendar_id: str = "primary",
        timezone: str = "America/Sao_Paulo",
        utc_offset: str = "-03:00",
        timeout: float = 30.0,
        session_factory: Callable[..., aiohttp.ClientSession] = aiohttp.ClientSession,
    ):
        self.access_token = access_token
        self.application_name = application_name
        self.calendar_id = calendar_id
        self.timezone = timezone
        self.utc_offset = utc_offset
        self.timeout = timeout
        self._session_factory = session_factory

    def _get_headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.access_token}",
            "User-Agent": self.application_name,
            "Accept": "application/json",
        }

    def _events_path(self, event_id: Optional[str] = None) -> str:
        path = f"/calendars/{quote(self.calendar_id, safe='')}/events"
        if event_id is not None:
            path = f"{path}/{quote(event_id, safe='')}"
        return path

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
    ) -> Optional[dict]:
        """
        Make an authenticated request to the Calendar API

        Returns:
            Parsed JSON body, or None for empty responses (DELETE)

        Raises:
            CalendarApiError: non-2xx status or transport failure
        """
        url = f"{BASE_URL}{path}"
        try:
            async with self._session_factory(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as session:
                async with session.request(
                    method,
                    url,
                    headers=self._get_headers(),
                    params=params,
                    json=json,
                ) as resp:
                    if resp.status >= 400:
                        raise await self._error_from_response(resp)
                    if resp.status == 204:
                        return None
                    return await resp.json(content_type=None)
        except CalendarApiError:
            raise
        except aiohttp.ClientError as e:
            logger.error(f"Calendar API {method} {path} failed: {e}")
            raise CalendarApiError(f"Calendar API request failed: {e}") from e
        except asyncio.TimeoutError as e:
            logger.error(f"Calendar API {method} {path} timed out after {self.timeout}s")
            raise CalendarApiError(f"Calendar API request timed out after {self.timeout}s") from e

    @staticmethod
    async def _error_from_response(resp) -> CalendarApiError:
        message = f"{resp.status} {resp.reason}"
        try:
            body = await resp.json(content_type=None)
        except ValueError:
            body = None
        if isinstance(body, dict):
            detail = body.get("error", {})
            if isinstance(detail, dict) and detail.get("message"):
                message = f"{message}: {detail['message']}"
        logger.error(f"Calendar API error: {message}")
        return CalendarApiError(message, status_code=resp.status, reason=resp.reason)

    async def create_event(self, request: EventoRequest) -> str:
        """Insert an event and return the id Google assigned to it"""
        payload = request.to_google_event(self.timezone, self.utc_offset)
        data = await self._request("POST", self._events_path(), json=payload)
        event_id = (data or {}).get("id")
        if not event_id:
            raise CalendarApiError("Calendar API returned no event id")
        logger.info(f"Created event {event_id} on calendar {self.calendar_id}")
        return event_id

    async def delete_event(self, event_id: str) -> None:
        """Delete an event; Google answers 404/410 if it does not exist"""
        await self._request("DELETE", self._events_path(event_id))
        logger.info(f"Deleted event {event_id} from calendar {self.calendar_id}")

    async def list_events(
        self,
        time_min: Optional[datetime] = None,
        max_results: int = 250,
    ) -> list[CalendarEvent]:
        """List events ordered by start time, expanding recurring ones"""
        params: dict[str, Any] = {
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": max_results,
        }
        if time_min is not None:
            params["timeMin"] = time_min.isoformat()

        data = await self._request("GET", self._events_path(), params=params)
        return [CalendarEvent.from_google_event(item) for item in (data or {}).get("items", [])]
