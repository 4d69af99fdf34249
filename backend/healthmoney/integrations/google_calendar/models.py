"""Calendar event data models"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class EventoRequest(BaseModel):
    """Event creation payload sent by the dashboard"""

    # The dashboard also sends emailPaciente; unknown fields are dropped
    model_config = ConfigDict(extra="ignore")

    titulo: Optional[str] = None
    dataInicio: Optional[str] = None  # "2023-12-25T10:00:00"
    dataFim: Optional[str] = None     # "2023-12-25T11:00:00"
    descricao: Optional[str] = None

    def to_google_event(self, timezone: str, utc_offset: str) -> dict:
        """Convert to Google Calendar API event format

        The offset literal is appended as-is to both timestamps.
        """
        return {
            "summary": self.titulo,
            "description": self.descricao,
            "start": {
                "dateTime": f"{self.dataInicio}{utc_offset}",
                "timeZone": timezone,
            },
            "end": {
                "dateTime": f"{self.dataFim}{utc_offset}",
                "timeZone": timezone,
            },
        }


@dataclass
class Principal:
    """The signed-in user, as kept in the session"""

    registration_id: str            # "google"
    name: str                       # provider subject id
    email: Optional[str] = None
    display_name: Optional[str] = None

    def to_session(self) -> dict:
        return {
            "registration_id": self.registration_id,
            "name": self.name,
            "email": self.email,
            "display_name": self.display_name,
        }

    @classmethod
    def from_session(cls, data: Optional[dict]) -> Optional["Principal"]:
        if not data or not data.get("name"):
            return None
        return cls(
            registration_id=data.get("registration_id", "google"),
            name=data["name"],
            email=data.get("email"),
            display_name=data.get("display_name"),
        )


@dataclass
class AuthorizedClient:
    """OAuth2 tokens issued to a principal for one provider registration"""

    registration_id: str
    principal_name: str
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    scopes: tuple[str, ...] = ()


@dataclass
class CalendarEvent:
    """An event read back from Google Calendar"""

    id: str
    titulo: str
    inicio: Optional[str]
    fim: Optional[str]
    descricao: Optional[str] = None
    link: Optional[str] = None

    @classmethod
    def from_google_event(cls, data: dict[str, Any]) -> "CalendarEvent":
        start = data.get("start", {})
        end = data.get("end", {})
        return cls(
            id=data["id"],
            titulo=data.get("summary", ""),
            # All-day events only carry a date
            inicio=start.get("dateTime") or start.get("date"),
            fim=end.get("dateTime") or end.get("date"),
            descricao=data.get("description"),
            link=data.get("htmlLink"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "titulo": self.titulo,
            "inicio": self.inicio,
            "fim": self.fim,
            "descricao": self.descricao,
            "link": self.link,
        }
