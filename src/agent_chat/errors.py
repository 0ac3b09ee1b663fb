"""Exception types for the agent chat scripts."""

from __future__ import annotations


class AgentChatError(Exception):
    """Base class for errors raised by this package."""


class TunnelError(AgentChatError):
    """The tunnel could not be opened or failed while running."""
