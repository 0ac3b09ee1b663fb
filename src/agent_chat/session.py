"""Agent session: adapts the Claude Agent SDK to the conversation loop."""

from __future__ import annotations

from collections.abc import AsyncGenerator, AsyncIterable
from typing import Any, Protocol

from claude_agent_sdk import (
    AssistantMessage,
    ClaudeAgentOptions,
    ResultMessage,
    SystemMessage,
    TextBlock,
    ToolUseBlock,
    query,
)
from loguru import logger

from agent_chat.config import AgentChatConfig
from agent_chat.models import (
    AgentEvent,
    AssistantEvent,
    ContentBlock,
    ResultEvent,
    SystemEvent,
    TextContent,
    ToolUseContent,
)

Prompt = str | AsyncIterable[dict[str, Any]]


class AgentSession(Protocol):
    """Anything that runs a prompt (or stream of turns) and yields agent events."""

    def invoke(
        self, prompt: Prompt, *, resume: str | None = None
    ) -> AsyncGenerator[AgentEvent, None]:
        """Run the prompt and yield events in receipt order."""
        ...


def build_options(
    config: AgentChatConfig,
    *,
    max_turns: int | None,
    permission_mode: str | None = None,
    resume: str | None = None,
) -> ClaudeAgentOptions:
    """Build SDK options from the chat configuration."""
    kwargs: dict[str, Any] = {
        "cwd": config.cwd,
        "setting_sources": list(config.setting_sources),
        "system_prompt": {"type": "preset", "preset": config.system_prompt_preset},
        "permission_mode": permission_mode or config.permission_mode,
        "max_turns": max_turns,
    }
    if config.allowed_tools is not None:
        kwargs["allowed_tools"] = list(config.allowed_tools)
    if config.cli_path:
        kwargs["cli_path"] = config.cli_path
    if resume:
        kwargs["resume"] = resume
    return ClaudeAgentOptions(**kwargs)


def from_sdk_message(message: Any) -> AgentEvent | None:
    """Convert an SDK message to an agent event.

    Messages the conversation loop has no use for (user echoes, raw
    stream events) map to None.
    """
    if isinstance(message, SystemMessage):
        data = message.data or {}
        return SystemEvent(subtype=message.subtype, session_id=data.get("session_id"))

    if isinstance(message, AssistantMessage):
        blocks: list[ContentBlock] = []
        for block in message.content:
            if isinstance(block, TextBlock):
                blocks.append(TextContent(text=block.text))
            elif isinstance(block, ToolUseBlock):
                blocks.append(ToolUseContent(name=block.name, id=block.id))
        return AssistantEvent(content=blocks)

    if isinstance(message, ResultMessage):
        error_message = getattr(message, "error_message", None)
        if message.is_error and not error_message:
            error_message = message.result
        return ResultEvent(
            subtype=message.subtype,
            is_error=message.is_error,
            error_message=error_message,
            warnings=getattr(message, "errors", None) or None,
            session_id=message.session_id,
            result=message.result,
        )

    return None


class ClaudeAgentSession:
    """Agent session backed by ``claude_agent_sdk.query``."""

    def __init__(
        self,
        config: AgentChatConfig,
        *,
        max_turns: int | None,
        permission_mode: str | None = None,
    ) -> None:
        self._config = config
        self._max_turns = max_turns
        self._permission_mode = permission_mode

    async def invoke(
        self, prompt: Prompt, *, resume: str | None = None
    ) -> AsyncGenerator[AgentEvent, None]:
        """Run one SDK query and yield the adapted events."""
        options = build_options(
            self._config,
            max_turns=self._max_turns,
            permission_mode=self._permission_mode,
            resume=resume,
        )
        logger.debug("Invoking agent (resume={}, max_turns={})", resume, self._max_turns)
        async for message in query(prompt=prompt, options=options):
            event = from_sdk_message(message)
            if event is None:
                logger.debug("Skipping SDK message {}", type(message).__name__)
                continue
            yield event
