"""POST /api/auth/login, /api/auth/logout, /api/init — session and API-key cookies."""
import logging
from fastapi import APIRouter, HTTPException, Request, Response

from config import settings
from core.errors import DataPlatformError, UnauthenticatedError
from integrations.dataplatform_client import DataPlatformClient
from integrations.identity_client import IdentityClient
from models.auth import InitRequest, LoginRequest, LoginResponse, SuccessResponse, UserProfile
from models.dataplatform import PlatformCredentials

router = APIRouter()
logger = logging.getLogger(__name__)


def _set_cookie(response: Response, name: str, value: str) -> None:
    response.set_cookie(
        name,
        value,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.SESSION_MAX_AGE_SECONDS,
    )


def _api_key(request: Request) -> str:
    return request.cookies.get(settings.API_KEY_COOKIE_NAME) or settings.DATAPLATFORM_API_KEY


@router.post("/auth/login", response_model=LoginResponse)
def login(req: LoginRequest, request: Request, response: Response):
    if not req.email or not req.password:
        raise HTTPException(400, detail="Email and password are required")
    try:
        with IdentityClient(api_key=_api_key(request)) as identity:
            session = identity.issue_session(req.email, req.password)
    except UnauthenticatedError as e:
        raise HTTPException(401, detail=e.message or "Invalid credentials")
    except Exception:
        logger.exception("Login failed")
        raise HTTPException(500, detail="Failed to process login request")

    _set_cookie(response, settings.SESSION_COOKIE_NAME, session.session_token)
    logger.info("Session established for user id=%s", session.id)
    return LoginResponse(user=UserProfile.model_validate(session.model_dump()))


@router.post("/auth/logout", response_model=SuccessResponse)
def logout(request: Request, response: Response):
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if token:
        try:
            with IdentityClient(api_key=_api_key(request)) as identity:
                identity.revoke_session(token)
        except DataPlatformError as e:
            logger.warning("Session revoke failed (cookie cleared anyway): %s", e)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return SuccessResponse()


@router.post("/init", response_model=SuccessResponse)
def init(req: InitRequest, response: Response):
    """Validate a per-user API key against the service listing, then keep it in a cookie."""
    if not req.api_key:
        raise HTTPException(400, detail="Data platform API key is required")
    creds = PlatformCredentials(api_key=req.api_key)
    try:
        with DataPlatformClient(creds, require_session=False) as platform:
            services = platform.list_services()
    except DataPlatformError as e:
        logger.warning("API key validation failed: %s", e)
        raise HTTPException(401, detail="Invalid data platform API key")
    if not services:
        raise HTTPException(401, detail="Invalid data platform API key: no services found")

    logger.info("API key validated (%d services)", len(services))
    _set_cookie(response, settings.API_KEY_COOKIE_NAME, req.api_key)
    return SuccessResponse()
