"""Configuration for the agent chat scripts."""

from __future__ import annotations

import os
import shutil
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

PermissionMode = Literal["default", "acceptEdits", "plan", "bypassPermissions"]
SettingSource = Literal["user", "project", "local"]


def _default_cli_path() -> str | None:
    # The bundled SDK binary may hang on Windows; prefer a system install
    return os.environ.get("CLAUDE_CLI_PATH") or shutil.which("claude")


class AgentChatConfig(BaseSettings):
    """Agent chat configuration, loaded from env vars or CLI overrides."""

    model_config = {"env_prefix": "AGENT_CHAT_"}

    # Agent session
    cwd: str = Field(
        default_factory=os.getcwd,
        description="Working directory the agent runs in (where .claude/ lives)",
    )
    setting_sources: list[SettingSource] = Field(
        default_factory=lambda: ["project"],
        description="Settings scopes the SDK loads agents and settings from",
    )
    system_prompt_preset: str = Field(
        default="claude_code",
        description="System prompt preset selector",
    )
    permission_mode: PermissionMode = Field(
        default="bypassPermissions",
        description="Tool permission mode for interactive chat",
    )
    allowed_tools: list[str] | None = Field(
        default=None,
        description="Restrict the agent to these tools (None keeps the SDK default)",
    )
    cli_path: str | None = Field(
        default_factory=_default_cli_path,
        description="Path to the claude CLI binary used by the SDK",
    )

    # Turn bounds per script
    query_max_turns: int | None = Field(default=1, description="Max turns for a one-shot query")
    chat_max_turns: int | None = Field(default=10, description="Max turns per chat request")
    stream_max_turns: int | None = Field(
        default=None,
        description="Max turns for the streaming chat (None is unbounded)",
    )

    default_prompt: str = Field(
        default="what is the secret",
        description="Prompt used by the one-shot query when none is given",
    )

    # Tunnel
    tunnel_port: int = Field(default=8000, description="Local port exposed by the tunnel")
    ngrok_authtoken: str | None = Field(
        default=None,
        description="ngrok auth token (falls back to the ngrok config file)",
    )

    # Display
    verbose: bool = Field(default=False, description="Emit debug logs to stderr")
