"""
Identity endpoint client.
Relays login credentials to the data platform's user-session API and revokes
sessions on logout. Holds no session state of its own.
"""
import logging
from typing import Optional

import httpx

from config import settings
from core.errors import UnauthenticatedError, UpstreamError
from integrations.dataplatform_client import (
    API_KEY_HEADER,
    SESSION_TOKEN_HEADER,
    error_message,
    translate_error,
)
from models.dataplatform import SessionProfile

logger = logging.getLogger(__name__)


class IdentityClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.url = (base_url or settings.DATAPLATFORM_URL).rstrip("/") + "/api/v2/user/session"
        self.api_key = api_key if api_key is not None else settings.DATAPLATFORM_API_KEY
        self.client = httpx.Client(
            timeout=settings.DATAPLATFORM_TIMEOUT_SECONDS,
            headers={API_KEY_HEADER: self.api_key},
            transport=transport,
        )

    def issue_session(self, email: str, password: str) -> SessionProfile:
        """POST /user/session. Rejected credentials raise UnauthenticatedError."""
        try:
            resp = self.client.post(self.url, json={"email": email, "password": password})
        except httpx.HTTPError as e:
            raise UpstreamError(None, f"Identity endpoint unreachable: {e}") from e
        if resp.status_code in (400, 401, 403, 404):
            message = error_message(resp) or "Failed to authenticate"
            logger.warning("Login rejected (%s): %s", resp.status_code, message)
            raise UnauthenticatedError(message)
        if not resp.is_success:
            raise translate_error(resp)
        return SessionProfile.model_validate(resp.json())

    def revoke_session(self, session_token: str) -> None:
        """DELETE /user/session for the given token."""
        try:
            resp = self.client.delete(self.url, headers={SESSION_TOKEN_HEADER: session_token})
        except httpx.HTTPError as e:
            raise UpstreamError(None, f"Identity endpoint unreachable: {e}") from e
        if not resp.is_success:
            raise translate_error(resp)

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *_):
        self.close()
