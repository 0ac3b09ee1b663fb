"""Click entry points for the query, chat and tunnel scripts."""

from __future__ import annotations

import asyncio
import sys

import click
from loguru import logger

from agent_chat import __version__
from agent_chat.config import AgentChatConfig
from agent_chat.display.terminal import ChatDisplay
from agent_chat.log import configure_logging


def _setup() -> tuple[AgentChatConfig, ChatDisplay]:
    # Windows consoles default to cp1252; allow the status glyphs through
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")  # type: ignore[union-attr]
        sys.stderr.reconfigure(encoding="utf-8", errors="replace")  # type: ignore[union-attr]
    config = AgentChatConfig()
    configure_logging(config.verbose)
    return config, ChatDisplay()


def _exit(ok: bool) -> None:
    sys.exit(0 if ok else 1)


@click.command()
@click.version_option(version=__version__)
@click.argument("prompt", required=False)
def query_command(prompt: str | None) -> None:
    """Send one prompt to the agent and print its response."""
    config, display = _setup()

    from agent_chat.oneshot import run_query
    from agent_chat.session import ClaudeAgentSession

    session = ClaudeAgentSession(
        config, max_turns=config.query_max_turns, permission_mode="default"
    )
    try:
        ok = asyncio.run(run_query(session, display, prompt or config.default_prompt))
    except KeyboardInterrupt:
        display.console.print("\n[dim]Interrupted.[/dim]")
        ok = True
    except Exception as e:
        display.fatal("Error querying agent", e)
        ok = False
    _exit(ok)


def _run_chat(streaming: bool) -> None:
    config, display = _setup()

    from agent_chat.controller import ConversationController
    from agent_chat.input import UserInputSource, stdin_chunks
    from agent_chat.session import ClaudeAgentSession

    max_turns = config.stream_max_turns if streaming else config.chat_max_turns
    session = ClaudeAgentSession(config, max_turns=max_turns)

    async def chat() -> bool:
        on_prompt = None if streaming else display.prompt
        async with UserInputSource(stdin_chunks(), on_prompt=on_prompt) as source:
            controller = ConversationController(session, source, display)
            if streaming:
                return await controller.run_streaming()
            return await controller.run()

    display.banner()
    try:
        ok = asyncio.run(chat())
    except KeyboardInterrupt:
        display.interrupted()
        _exit(True)
    except Exception as e:
        display.fatal("Error in chat session", e)
        _exit(False)

    display.goodbye()
    _exit(ok)


@click.command()
@click.version_option(version=__version__)
def chat_command() -> None:
    """Interactive chat, one agent request per turn with session resume."""
    _run_chat(streaming=False)


@click.command()
@click.version_option(version=__version__)
def chat_stream_command() -> None:
    """Interactive chat over a single streaming agent session."""
    _run_chat(streaming=True)


@click.command()
@click.version_option(version=__version__)
def tunnel_command() -> None:
    """Expose the local port through a public tunnel."""
    config, display = _setup()

    from agent_chat.errors import TunnelError
    from agent_chat.tunnel import Tunnel

    tunnel = Tunnel(config, display)
    try:
        tunnel.run()
    except KeyboardInterrupt:
        display.console.print("\nShutting down tunnel...")
        tunnel.close()
        _exit(True)
    except TunnelError as e:
        logger.debug("Tunnel failed: {!r}", e)
        display.fatal("Tunnel error", e)
        tunnel.close()
        _exit(False)
    _exit(True)
