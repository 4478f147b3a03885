"""
Chat agent — the tool-calling loop between the language model and the
data platform.

One run: send the transcript and tool declarations to the model; while it asks
for a tool, dispatch it, append the assistant turn and the function result, and
ask again. A reply without a tool call ends the run. There is no iteration cap
and no retry; any failure ends the run.
"""
import json
import logging
import re
from typing import Any, Optional, Protocol

from pydantic import BaseModel

from config import settings
from core.errors import AccessForbiddenError, ToolArgumentsError
from core.tool_registry import ToolRegistry, build_registry
from integrations.dataplatform_client import DataPlatformClient
from integrations.ollama_client import OllamaClient
from integrations.search_client import SearchClient
from models.chat import ChatResult, ConversationTurn, ModelReply, ToolInvocation
from models.dataplatform import PlatformCredentials
from prompts.chat_prompts import REASONING_END, REASONING_START, agent_system_prompt

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response generated"

_REASONING = re.compile(
    re.escape(REASONING_START) + r"([\s\S]*?)" + re.escape(REASONING_END)
)


class ChatModel(Protocol):
    def chat_with_tools(self, turns: list[ConversationTurn], tools: list[dict]) -> ModelReply: ...


def split_reasoning(content: str) -> tuple[str, Optional[str]]:
    """Return (visible answer, reasoning). Only the first reasoning block is removed."""
    m = _REASONING.search(content)
    if not m:
        return content.strip(), None
    answer = (content[:m.start()] + content[m.end():]).strip()
    return answer, m.group(1).strip()


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


def serialize_result(value: Any) -> str:
    return json.dumps(_jsonable(value), default=str)


def _parse_arguments(invocation: ToolInvocation) -> dict:
    args = invocation.arguments
    if isinstance(args, str):
        try:
            args = json.loads(args) if args.strip() else {}
        except json.JSONDecodeError as e:
            raise ToolArgumentsError(f"Arguments for {invocation.name} are not valid JSON: {e}") from e
    if not isinstance(args, dict):
        raise ToolArgumentsError(f"Arguments for {invocation.name} must be a JSON object")
    return args


class ConversationOrchestrator:
    """Runs the model ⇄ tool loop for one request."""

    def __init__(self, llm: ChatModel, tools: ToolRegistry, platform: DataPlatformClient):
        self.llm = llm
        self.tools = tools
        self.platform = platform

    def _dispatch(self, invocation: ToolInvocation) -> Any:
        self.tools.get(invocation.name)
        args = _parse_arguments(invocation)
        try:
            return self.tools.dispatch(invocation.name, args)
        except AccessForbiddenError:
            raise
        except Exception as e:
            if AccessForbiddenError.looks_forbidden(e):
                raise AccessForbiddenError(str(e)) from e
            raise

    def run(self, conversation: list[ConversationTurn]) -> ChatResult:
        self.platform.endpoints.clear()
        turns = list(conversation)
        schemas = self.tools.schemas()
        step = 0

        while True:
            step += 1
            reply = self.llm.chat_with_tools(turns, schemas)
            if not isinstance(reply, ToolInvocation):
                break

            logger.info("Step %d: model requested %s", step, reply.name)
            result = self._dispatch(reply)
            turns.append(ConversationTurn(role="assistant", content=reply.content or ""))
            turns.append(ConversationTurn(role="function", name=reply.name, content=serialize_result(result)))

        answer, reasoning = split_reasoning(reply.content or "")
        endpoints = self.platform.endpoints.snapshot()
        logger.info("Chat finished after %d model calls, %d platform requests", step, len(endpoints))
        return ChatResult(answer=answer or NO_RESPONSE, reasoning=reasoning, endpoints=endpoints)


def build_conversation(message: str) -> list[ConversationTurn]:
    system = agent_system_prompt.format(default_service=settings.DEFAULT_SERVICE)
    return [
        ConversationTurn(role="system", content=system),
        ConversationTurn(role="user", content=message),
    ]


def handle_chat(
    message: str,
    credentials: PlatformCredentials,
    ollama: Optional[ChatModel] = None,
) -> ChatResult:
    """Main chat handler. Builds per-request clients, runs the loop, closes the clients."""
    ollama = ollama or OllamaClient()
    with DataPlatformClient(credentials) as platform:
        search = SearchClient() if settings.SERPER_API_KEY else None
        try:
            registry = build_registry(platform, search)
            orchestrator = ConversationOrchestrator(ollama, registry, platform)
            return orchestrator.run(build_conversation(message))
        finally:
            if search is not None:
                search.close()
