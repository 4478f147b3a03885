"""Request-scoped dependencies: credentials read from cookies, never stored globally."""
from typing import Optional

from fastapi import HTTPException, Request

from config import settings
from models.dataplatform import PlatformCredentials


def read_credentials(request: Request) -> Optional[PlatformCredentials]:
    """API key from the per-user cookie (or the configured service key) plus the session cookie."""
    api_key = request.cookies.get(settings.API_KEY_COOKIE_NAME) or settings.DATAPLATFORM_API_KEY
    if not api_key:
        return None
    return PlatformCredentials(
        api_key=api_key,
        session_token=request.cookies.get(settings.SESSION_COOKIE_NAME),
    )


def get_credentials(request: Request) -> PlatformCredentials:
    creds = read_credentials(request)
    if creds is None:
        raise HTTPException(status_code=401, detail="Data platform session not found")
    return creds
