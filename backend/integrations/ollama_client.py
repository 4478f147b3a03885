"""
Ollama REST API client.
Wraps POST /api/chat with tool declarations and turns the reply into either a
final answer or a single tool invocation. One attempt per call, no retries.
"""
import logging
from typing import Optional
import httpx

from config import settings
from models.chat import ConversationTurn, FinalAnswer, ModelReply, ToolInvocation

logger = logging.getLogger(__name__)


def to_ollama_message(turn: ConversationTurn) -> dict:
    """Function turns travel as Ollama `tool` messages tagged with the tool name."""
    if turn.role == "function":
        return {"role": "tool", "content": turn.content, "tool_name": turn.name}
    return {"role": turn.role, "content": turn.content}


class OllamaClient:
    """Thin client for the Ollama local LLM server."""

    def __init__(self, transport: Optional[httpx.BaseTransport] = None):
        self.host = settings.OLLAMA_HOST.rstrip("/")
        self.model = settings.OLLAMA_MODEL
        self.timeout = settings.OLLAMA_TIMEOUT_SECONDS
        self.transport = transport

    def is_healthy(self) -> tuple[bool, Optional[str]]:
        """Returns (True, model_name) if Ollama is reachable, (False, error) otherwise."""
        try:
            resp = httpx.get(f"{self.host}/api/version", timeout=5)
            resp.raise_for_status()
            return True, self.model
        except httpx.HTTPError as e:
            return False, str(e)

    def chat_with_tools(self, turns: list[ConversationTurn], tools: list[dict]) -> ModelReply:
        """
        Call Ollama /api/chat with the full transcript and the declared tools.
        Ollama picks tools automatically; when it asks for several at once only
        the first is returned and the model re-requests the rest on the next turn.
        """
        payload = {
            "model": self.model,
            "messages": [to_ollama_message(t) for t in turns],
            "tools": tools,
            "stream": False,
            "options": {
                "num_ctx": settings.OLLAMA_NUM_CTX,
                "temperature": settings.OLLAMA_TEMPERATURE,
            },
        }
        logger.debug("Ollama chat: %d turns, %d tools", len(turns), len(tools))
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                resp = client.post(f"{self.host}/api/chat", json=payload)
                resp.raise_for_status()
        except httpx.HTTPError as e:
            raise RuntimeError(f"Ollama chat failed: {e}") from e

        message = resp.json().get("message") or {}
        content = message.get("content") or ""
        tool_calls = message.get("tool_calls") or []
        if not tool_calls:
            return FinalAnswer(content=content)

        if len(tool_calls) > 1:
            logger.debug("Model requested %d tools; dispatching the first", len(tool_calls))
        function = tool_calls[0].get("function") or {}
        return ToolInvocation(
            name=function.get("name", ""),
            arguments=function.get("arguments") or {},
            content=content,
        )
