"""Data models for turns, session state, agent events and input signals."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field


class Turn(BaseModel):
    """A single user message submitted to the agent."""

    role: Literal["user"] = "user"
    content: str = Field(description="Trimmed user text")
    parent_tool_use_id: str | None = Field(
        default=None, description="Tool use this message answers, if any"
    )
    session_id: str | None = Field(default=None, description="Session this turn belongs to")

    def to_stream_message(self) -> dict[str, Any]:
        """Shape the turn as an SDK streaming-input message."""
        return {
            "type": "user",
            "message": {"role": self.role, "content": self.content},
            "parent_tool_use_id": self.parent_tool_use_id,
            "session_id": self.session_id or "default",
        }


class SessionState(BaseModel):
    """Resumable session identifier for one conversation."""

    session_id: str | None = Field(default=None, description="Captured SDK session id")
    first_turn: bool = Field(default=True, description="No turn has been submitted yet")

    @property
    def resume_id(self) -> str | None:
        """Session id to resume, or None on the first turn."""
        if self.first_turn:
            return None
        return self.session_id


# ---------- Agent events ----------


class TextContent(BaseModel):
    """Visible assistant text."""

    type: Literal["text"] = "text"
    text: str


class ToolUseContent(BaseModel):
    """A tool invocation by the agent."""

    type: Literal["tool_use"] = "tool_use"
    name: str
    id: str | None = None


ContentBlock = Annotated[TextContent | ToolUseContent, Field(discriminator="type")]


class SystemEvent(BaseModel):
    """System message, e.g. the ``init`` notice carrying the session id."""

    kind: Literal["system"] = "system"
    subtype: str = Field(description="System message subtype, e.g. init")
    session_id: str | None = Field(default=None, description="Session id, when present")


class AssistantEvent(BaseModel):
    """An assistant message with ordered content blocks."""

    kind: Literal["assistant"] = "assistant"
    content: list[ContentBlock] = Field(default_factory=list)

    @property
    def texts(self) -> list[str]:
        return [block.text for block in self.content if isinstance(block, TextContent)]


class ResultEvent(BaseModel):
    """Final message of one agent run."""

    kind: Literal["result"] = "result"
    subtype: str = Field(default="success", description="Result subtype")
    is_error: bool = Field(default=False, description="Whether the run failed")
    error_message: str | None = Field(default=None, description="Failure description")
    warnings: list[Any] | None = Field(default=None, description="Non-fatal errors")
    session_id: str | None = Field(default=None, description="Session id of the run")
    result: str | None = Field(default=None, description="Final result text")


AgentEvent = Annotated[SystemEvent | AssistantEvent | ResultEvent, Field(discriminator="kind")]


# ---------- Input signals ----------


class EndReason(StrEnum):
    """Why the input sequence ended."""

    SENTINEL = "sentinel"
    CLOSED = "closed"


class InputLine(BaseModel):
    """A finalized, non-empty, non-sentinel line of user input."""

    text: str


class EndOfInput(BaseModel):
    """Terminal input signal."""

    reason: EndReason


InputSignal = InputLine | EndOfInput
