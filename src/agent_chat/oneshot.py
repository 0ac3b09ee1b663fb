"""One-shot query: send a single prompt and print the response."""

from __future__ import annotations

import contextlib

from loguru import logger

from agent_chat.display.terminal import ChatDisplay
from agent_chat.models import AssistantEvent, ResultEvent
from agent_chat.session import AgentSession


async def run_query(session: AgentSession, display: ChatDisplay, prompt: str) -> bool:
    """Run one prompt to completion. Returns False if the agent reported an error."""
    display.querying(prompt)

    response: list[str] = []
    ok = True
    events = session.invoke(prompt)
    async with contextlib.aclosing(events):
        async for event in events:
            if isinstance(event, AssistantEvent):
                # Only the text is shown; tool use stays quiet in one-shot mode
                for text in event.texts:
                    display.plain_text(text)
                    response.append(text)
            elif isinstance(event, ResultEvent):
                if event.is_error:
                    ok = False
                    display.error(event.error_message)
                if event.warnings:
                    display.warnings(event.warnings)
            else:
                logger.debug("Query event: {}", event.kind)

    if not response:
        display.no_response()
    return ok
