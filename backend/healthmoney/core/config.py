"""Application settings loaded from the environment"""

import logging
import os
import secrets
from dataclasses import dataclass, field

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


@dataclass
class Settings:
    """Runtime configuration for the agenda backend"""

    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_redirect_uri: str = "http://localhost:8000/login/oauth2/code/google"

    session_secret_key: str = field(default_factory=lambda: secrets.token_urlsafe(32))
    encryption_key: str | None = None

    application_name: str = "HealthMoney"
    calendar_timezone: str = "America/Sao_Paulo"
    calendar_utc_offset: str = "-03:00"
    google_api_timeout: float = 30.0

    cors_origins: list[str] = field(default_factory=lambda: ["*"])

    # Security posture (see SecurityConfig)
    csrf_enabled: bool = False
    login_success_url: str = "/loginGoogle"
    require_login_for_delete: bool = False
    strict_status_codes: bool = False

    log_level: str = "INFO"
    app_env: str = "unknown"
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables (and .env, if present)"""
        session_secret = os.getenv("SESSION_SECRET_KEY")
        if not session_secret:
            logger.warning("SESSION_SECRET_KEY not set, sessions will not survive a restart")
            session_secret = secrets.token_urlsafe(32)

        settings = cls(
            google_client_id=os.getenv("GOOGLE_CLIENT_ID"),
            google_client_secret=os.getenv("GOOGLE_CLIENT_SECRET"),
            google_redirect_uri=os.getenv(
                "GOOGLE_REDIRECT_URI", "http://localhost:8000/login/oauth2/code/google"
            ),
            session_secret_key=session_secret,
            encryption_key=os.getenv("ENCRYPTION_KEY"),
            application_name=os.getenv("APPLICATION_NAME", "HealthMoney"),
            calendar_timezone=os.getenv("CALENDAR_TIMEZONE", "America/Sao_Paulo"),
            calendar_utc_offset=os.getenv("CALENDAR_UTC_OFFSET", "-03:00"),
            google_api_timeout=float(os.getenv("GOOGLE_API_TIMEOUT", 30)),
            cors_origins=[
                origin.strip()
                for origin in os.getenv("CORS_ORIGINS", "*").split(",")
                if origin.strip()
            ],
            csrf_enabled=_env_flag("CSRF_ENABLED"),
            login_success_url=os.getenv("LOGIN_SUCCESS_URL", "/loginGoogle"),
            require_login_for_delete=_env_flag("REQUIRE_LOGIN_FOR_DELETE"),
            strict_status_codes=_env_flag("STRICT_STATUS_CODES"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            app_env=os.getenv("APP_ENV", "unknown"),
            api_host=os.getenv("API_HOST", "0.0.0.0"),
            api_port=int(os.getenv("API_PORT", 8000)),
        )

        if not all([settings.google_client_id, settings.google_client_secret]):
            logger.warning("Google OAuth credentials not configured")

        return settings
