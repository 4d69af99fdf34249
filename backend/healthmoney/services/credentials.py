from __future__ import annotations

import logging
from typing import Optional, Protocol

from healthmoney.integrations.google_calendar.exceptions import AuthorizedClientNotFound
from healthmoney.integrations.google_calendar.models import AuthorizedClient, Principal

logger = logging.getLogger(__name__)


class AuthorizedClientStore(Protocol):
    def load_authorized_client(
        self, registration_id: str, principal_name: str
    ) -> Optional[AuthorizedClient]:
        ...


class CredentialResolver:
    """Returns the access token the login flow stored for a principal.

    No refresh and no expiry check: whatever is on file is handed back.
    """

    def __init__(self, store: AuthorizedClientStore):
        self.store = store

    def resolve_access_token(self, principal: Optional[Principal]) -> str:
        if principal is None:
            raise AuthorizedClientNotFound()

        client = self.store.load_authorized_client(principal.registration_id, principal.name)
        if client is None:
            logger.warning(f"No authorized client on file for principal {principal.name}")
            raise AuthorizedClientNotFound(principal.registration_id, principal.name)
        return client.access_token
