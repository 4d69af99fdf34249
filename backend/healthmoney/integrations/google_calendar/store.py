"""In-memory store of OAuth2 authorized clients"""

import logging
from dataclasses import replace
from typing import Optional

from cryptography.fernet import Fernet

from healthmoney.integrations.google_calendar.models import AuthorizedClient

logger = logging.getLogger(__name__)


class InMemoryAuthorizedClientStore:
    """
    Authorized clients keyed by (registration id, principal name)

    Tokens are kept Fernet-encrypted; nothing is written to disk, so every
    user has to log in again after a restart.
    """

    def __init__(self, encryption_key: Optional[str | bytes] = None):
        self._cipher = Fernet(encryption_key or Fernet.generate_key())
        self._clients: dict[tuple[str, str], AuthorizedClient] = {}

    def encrypt_token(self, token: str) -> str:
        """Encrypt token for storage"""
        return self._cipher.encrypt(token.encode()).decode()

    def decrypt_token(self, encrypted_token: str) -> str:
        """Decrypt stored token"""
        return self._cipher.decrypt(encrypted_token.encode()).decode()

    def save_authorized_client(self, client: AuthorizedClient) -> None:
        encrypted = replace(
            client,
            access_token=self.encrypt_token(client.access_token),
            refresh_token=self.encrypt_token(client.refresh_token) if client.refresh_token else None,
        )
        self._clients[(client.registration_id, client.principal_name)] = encrypted
        logger.info(
            f"Saved authorized client for principal {client.principal_name} "
            f"(registration {client.registration_id})"
        )

    def load_authorized_client(
        self, registration_id: str, principal_name: str
    ) -> Optional[AuthorizedClient]:
        stored = self._clients.get((registration_id, principal_name))
        if stored is None:
            return None
        return replace(
            stored,
            access_token=self.decrypt_token(stored.access_token),
            refresh_token=self.decrypt_token(stored.refresh_token) if stored.refresh_token else None,
        )

    def remove_authorized_client(self, registration_id: str, principal_name: str) -> None:
        if self._clients.pop((registration_id, principal_name), None) is not None:
            logger.info(
                f"Removed authorized client for principal {principal_name} "
                f"(registration {registration_id})"
            )
