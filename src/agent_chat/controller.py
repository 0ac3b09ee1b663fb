"""Conversation loop: feeds user turns to an agent session and renders events."""

from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator
from enum import StrEnum
from typing import Any

from loguru import logger

from agent_chat.display.terminal import ChatDisplay
from agent_chat.input import UserInputSource
from agent_chat.models import (
    AgentEvent,
    EndOfInput,
    ResultEvent,
    SessionState,
    SystemEvent,
    Turn,
)
from agent_chat.session import AgentSession


class TurnOutcome(StrEnum):
    """How one agent event stream ended."""

    SUCCESS = "success"
    FAILED = "failed"


class ConversationController:
    """Runs one conversation against an agent session.

    Session state is owned by the controller instance and threaded into
    each invocation as the resume id.
    """

    def __init__(
        self,
        session: AgentSession,
        input_source: UserInputSource,
        display: ChatDisplay,
        state: SessionState | None = None,
    ) -> None:
        self._session = session
        self._input = input_source
        self._display = display
        self._state = state or SessionState()
        self._announced = False

    @property
    def state(self) -> SessionState:
        return self._state

    def handle_event(self, event: AgentEvent) -> TurnOutcome | None:
        """Apply one event to session state and render it.

        Returns an outcome for a result event, None otherwise.
        """
        if isinstance(event, SystemEvent):
            if event.session_id:
                if event.session_id != self._state.session_id:
                    logger.debug("Captured session id {}", event.session_id)
                self._state.session_id = event.session_id
            if event.subtype == "init" and not self._announced:
                self._announced = True
                self._display.ready()
            return None

        self._display.render(event)
        if isinstance(event, ResultEvent):
            return TurnOutcome.FAILED if event.is_error else TurnOutcome.SUCCESS
        return None

    async def run_turn(self, turn: Turn) -> TurnOutcome:
        """Submit one turn and consume its event stream to completion."""
        resume = self._state.resume_id
        logger.debug("Submitting turn (resume={}): {!r}", resume, turn.content)
        self._state.first_turn = False

        events = self._session.invoke(turn.content, resume=resume)
        async with contextlib.aclosing(events):
            async for event in events:
                outcome = self.handle_event(event)
                if outcome is not None:
                    return outcome
        # No result event: the turn ended without reporting a failure
        return TurnOutcome.SUCCESS

    async def run(self) -> bool:
        """Request-per-turn loop. Returns False if the agent reported an error."""
        while True:
            signal = await self._input.next_signal()
            if isinstance(signal, EndOfInput):
                logger.debug("Conversation ended ({})", signal.reason)
                return True

            turn = Turn(content=signal.text, session_id=self._state.session_id)
            if await self.run_turn(turn) is TurnOutcome.FAILED:
                return False

    async def _turn_stream(self) -> AsyncIterator[dict[str, Any]]:
        async for text in self._input.lines():
            turn = Turn(content=text, session_id=self._state.session_id)
            logger.debug("Streaming turn: {!r}", turn.content)
            self._state.first_turn = False
            yield turn.to_stream_message()

    async def run_streaming(self) -> bool:
        """Continuous-input loop: one agent invocation fed by a stream of turns.

        Lines are forwarded as soon as they are read; events are rendered in
        receipt order.
        """
        self._display.prompt()
        events = self._session.invoke(self._turn_stream(), resume=None)
        async with contextlib.aclosing(events):
            async for event in events:
                outcome = self.handle_event(event)
                if outcome is TurnOutcome.FAILED:
                    return False
                if outcome is TurnOutcome.SUCCESS and self._input.ended is None:
                    self._display.prompt()
        return True
