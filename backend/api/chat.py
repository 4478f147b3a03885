"""POST /api/chat — natural language questions answered through the data platform."""
import logging
from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_credentials
from core.chat_agent import handle_chat
from core.errors import AccessForbiddenError, UnauthenticatedError
from models.chat import ChatRequest, ChatResponse
from models.dataplatform import PlatformCredentials

router = APIRouter()
logger = logging.getLogger(__name__)


def _forbidden_detail(e: AccessForbiddenError) -> str:
    if e.resource:
        return f"You do not have permission to access {e.resource}."
    return "You do not have permission to access the requested data."


@router.post("/chat", response_model=ChatResponse)
def chat(req: ChatRequest, creds: PlatformCredentials = Depends(get_credentials)):
    if not req.message.strip():
        raise HTTPException(400, detail="Message is required")
    try:
        result = handle_chat(req.message, creds)
    except UnauthenticatedError as e:
        raise HTTPException(401, detail=e.message)
    except AccessForbiddenError as e:
        logger.warning("Access forbidden during chat: %s", e)
        raise HTTPException(403, detail=_forbidden_detail(e))
    except Exception:
        logger.exception("Chat failed")
        raise HTTPException(500, detail="Failed to process chat message")
    return ChatResponse(answer=result.answer, reasoning=result.reasoning, endpoints=result.endpoints)
