"""Shared test fixtures."""

from __future__ import annotations

import io
from collections.abc import AsyncIterable, AsyncIterator, Sequence
from typing import Any

import pytest
from rich.console import Console

from agent_chat.config import AgentChatConfig
from agent_chat.display.terminal import ChatDisplay
from agent_chat.models import (
    AgentEvent,
    AssistantEvent,
    ResultEvent,
    SystemEvent,
    TextContent,
    ToolUseContent,
)


class FakeAgentSession:
    """Agent session that replays scripted event sequences and records calls."""

    def __init__(self, scripts: Sequence[Sequence[AgentEvent]] = ()) -> None:
        self._scripts = list(scripts)
        self.calls: list[dict[str, Any]] = []
        self.streamed: list[dict[str, Any]] = []

    async def invoke(
        self, prompt: str | AsyncIterable[dict[str, Any]], *, resume: str | None = None
    ) -> AsyncIterator[AgentEvent]:
        index = len(self.calls)
        self.calls.append({"prompt": prompt, "resume": resume})
        if isinstance(prompt, str):
            events = self._scripts[index] if index < len(self._scripts) else []
            for event in events:
                yield event
            return

        # Streaming input: one scripted sequence per received turn
        turn_index = 0
        async for message in prompt:
            self.streamed.append(message)
            events = self._scripts[turn_index] if turn_index < len(self._scripts) else []
            turn_index += 1
            for event in events:
                yield event

    @property
    def prompts(self) -> list[Any]:
        return [call["prompt"] for call in self.calls]

    @property
    def resumes(self) -> list[str | None]:
        return [call["resume"] for call in self.calls]


class ConsoleCapture:
    """A ChatDisplay writing to in-memory buffers."""

    def __init__(self) -> None:
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.display = ChatDisplay(
            console=Console(file=self.out, width=120, color_system=None, highlight=False),
            err_console=Console(file=self.err, width=120, color_system=None, highlight=False),
        )

    @property
    def stdout(self) -> str:
        return self.out.getvalue()

    @property
    def stderr(self) -> str:
        return self.err.getvalue()


async def chunk_stream(chunks: Sequence[str]) -> AsyncIterator[str]:
    """Create an async iterator of text chunks."""
    for chunk in chunks:
        yield chunk


def init_event(session_id: str = "42") -> SystemEvent:
    return SystemEvent(subtype="init", session_id=session_id)


def text_event(*texts: str) -> AssistantEvent:
    return AssistantEvent(content=[TextContent(text=t) for t in texts])


def tool_event(*names: str) -> AssistantEvent:
    return AssistantEvent(content=[ToolUseContent(name=n, id=f"toolu_{n}") for n in names])


def ok_result(warnings: list[Any] | None = None) -> ResultEvent:
    return ResultEvent(subtype="success", is_error=False, warnings=warnings)


def error_result(message: str | None = "boom", warnings: list[Any] | None = None) -> ResultEvent:
    return ResultEvent(
        subtype="error_during_execution", is_error=True, error_message=message, warnings=warnings
    )


@pytest.fixture
def capture() -> ConsoleCapture:
    return ConsoleCapture()


@pytest.fixture
def config(tmp_path: Any) -> AgentChatConfig:
    """Create a test config rooted in a temporary directory."""
    return AgentChatConfig(cwd=str(tmp_path), cli_path=None)
