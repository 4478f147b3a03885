"""GET /api/health — system dependency check."""
import logging
import httpx
from fastapi import APIRouter
from config import settings
from integrations.ollama_client import OllamaClient

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check():
    ollama_status   = _check_ollama()
    platform_status = _check_dataplatform()
    overall = "ok" if ollama_status["status"] == "up" and platform_status["status"] == "up" else "degraded"
    return {
        "status": overall,
        "services": {
            "ollama":       ollama_status,
            "dataplatform": platform_status,
        },
    }


def _check_ollama() -> dict:
    ok, detail = OllamaClient().is_healthy()
    if ok:
        return {"status": "up", "model": detail, "url": settings.OLLAMA_HOST}
    return {"status": "down", "error": detail}


def _check_dataplatform() -> dict:
    """Any HTTP answer counts as up: the root endpoint rejects requests without a key."""
    url = settings.DATAPLATFORM_URL.rstrip("/") + "/api/v2/"
    try:
        resp = httpx.get(url, timeout=5)
        if resp.status_code >= 500:
            return {"status": "down", "error": f"HTTP {resp.status_code}"}
        return {"status": "up", "url": settings.DATAPLATFORM_URL}
    except httpx.HTTPError as e:
        return {"status": "down", "error": str(e)}
