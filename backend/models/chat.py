"""Pydantic schemas for the chat API, the conversation transcript and model replies."""
from typing import Any, Literal, Optional, Union
from pydantic import BaseModel, model_validator


class ConversationTurn(BaseModel):
    role: Literal["user", "assistant", "system", "function"]
    content: str
    name: Optional[str] = None     # tool name, required on function turns

    @model_validator(mode="after")
    def _function_turn_is_named(self):
        if self.role == "function" and not self.name:
            raise ValueError("function turns must carry the name of the tool that produced them")
        return self


class FinalAnswer(BaseModel):
    kind: Literal["final"] = "final"
    content: str = ""


class ToolInvocation(BaseModel):
    kind: Literal["tool"] = "tool"
    name: str
    arguments: Union[dict[str, Any], str] = {}   # str when the model sent raw JSON
    content: str = ""


ModelReply = Union[FinalAnswer, ToolInvocation]


class ChatResult(BaseModel):
    """Outcome of one orchestration run."""
    answer: str
    reasoning: Optional[str] = None
    endpoints: list[str] = []


class ChatRequest(BaseModel):
    message: str = ""


class ChatResponse(BaseModel):
    answer: str
    reasoning: Optional[str] = None
    endpoints: list[str] = []
