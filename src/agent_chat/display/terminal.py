"""Rich terminal rendering for agent conversations."""

from __future__ import annotations

import json
import traceback
from typing import Any

from rich.console import Console
from rich.text import Text

from agent_chat.models import AgentEvent, AssistantEvent, ResultEvent, TextContent, ToolUseContent

UNKNOWN_ERROR = "Unknown error"


class ChatDisplay:
    """Console output for the chat and query scripts.

    Event rendering depends only on the event passed in, so replaying a
    sequence of events produces the same output.
    """

    def __init__(self, console: Console | None = None, err_console: Console | None = None) -> None:
        self._console = console or Console(highlight=False)
        self._err = err_console or Console(stderr=True, highlight=False)

    @property
    def console(self) -> Console:
        """Access the underlying Rich console."""
        return self._console

    # ---------- chat chrome ----------

    def banner(self) -> None:
        self._console.print("[bold green]Claude Agent Chat[/bold green]")
        self._console.print("[dim]Type 'exit' or 'quit' to end the conversation[/dim]\n")

    def ready(self) -> None:
        self._console.print("\n[green]✓ Agent ready[/green]\n")

    def prompt(self) -> None:
        """Write the user prompt marker without a trailing newline."""
        self._console.print("[cyan]You: [/cyan]", end="")

    def goodbye(self) -> None:
        self._console.print("\n[dim]Goodbye![/dim]")

    def interrupted(self) -> None:
        self._console.print("\n\n[dim]Chat interrupted. Goodbye![/dim]")

    # ---------- events ----------

    def render(self, event: AgentEvent) -> None:
        """Render an assistant or result event; system events are silent."""
        if isinstance(event, AssistantEvent):
            self.assistant(event)
        elif isinstance(event, ResultEvent):
            if event.is_error:
                self.error(event.error_message)
            elif event.warnings:
                self.warnings(event.warnings)

    def assistant(self, event: AssistantEvent) -> None:
        """Render text blocks under one header and a notice per tool use."""
        has_text = False
        for block in event.content:
            if isinstance(block, TextContent):
                if not has_text:
                    self._console.print("\n[green]Assistant: [/green]", end="")
                    has_text = True
                self._console.print(Text(block.text))
            elif isinstance(block, ToolUseContent):
                self.tool_use(block.name)
        if has_text:
            self._console.print()

    def tool_use(self, name: str) -> None:
        self._console.print(Text(f"\n[Using tool: {name}]", style="dim"))

    def error(self, message: str | None) -> None:
        self._err.print(Text(f"\n❌ Error: {message or UNKNOWN_ERROR}", style="red"))

    def warnings(self, warnings: list[Any]) -> None:
        body = json.dumps(warnings, indent=2, default=str)
        self._err.print("[yellow]⚠️  Warnings:[/yellow]", Text(body))

    # ---------- one-shot query ----------

    def querying(self, prompt: str) -> None:
        self._console.print(Text(f'Querying agent with prompt: "{prompt}"\n'))

    def plain_text(self, text: str) -> None:
        self._console.print(Text(text))

    def no_response(self) -> None:
        self._console.print("No response received from agent")

    # ---------- failures ----------

    def fatal(self, title: str, exc: BaseException) -> None:
        """Print an uncaught exception with its traceback to stderr."""
        self._err.print(Text.assemble((f"{title}:", "red"), f" {exc}"))
        tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        self._err.print(Text(tb.rstrip(), style="dim"))
