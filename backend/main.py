"""
Quarry — Conversational Data-Platform Agent
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import auth, chat, health
from config import settings

# ── Logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger("quarry")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Quarry starting up (data platform: %s, model: %s)",
                settings.DATAPLATFORM_URL, settings.OLLAMA_MODEL)
    if not settings.SERPER_API_KEY:
        logger.info("SERPER_API_KEY not set; webSearch tool disabled")
    yield
    logger.info("Quarry shutting down.")


# ── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(
    title="Quarry — Conversational Data-Platform Agent",
    description="Answers natural-language questions by calling data-platform tools through an LLM.",
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS ──────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(health.router, prefix="/api")
app.include_router(auth.router,   prefix="/api")
app.include_router(chat.router,   prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.API_HOST, port=settings.API_PORT)
