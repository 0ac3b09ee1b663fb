"""Public tunnel to a local port, backed by pyngrok."""

from __future__ import annotations

import signal

from loguru import logger
from pyngrok import conf, ngrok
from pyngrok.exception import PyngrokError

from agent_chat.config import AgentChatConfig
from agent_chat.display.terminal import ChatDisplay
from agent_chat.errors import TunnelError

# Popen reports death by signal N as -N
_STOP_CODES = frozenset({-signal.SIGINT, -signal.SIGTERM})


class Tunnel:
    """Opens a tunnel to a local port and keeps it up until it closes."""

    def __init__(self, config: AgentChatConfig, display: ChatDisplay) -> None:
        self._config = config
        self._display = display
        self._public_url: str | None = None

    @property
    def public_url(self) -> str | None:
        return self._public_url

    def open(self) -> str:
        """Request a tunnel and return its public URL."""
        pyngrok_config = conf.get_default()
        if self._config.ngrok_authtoken:
            pyngrok_config.auth_token = self._config.ngrok_authtoken
        try:
            tunnel = ngrok.connect(self._config.tunnel_port, pyngrok_config=pyngrok_config)
        except PyngrokError as e:
            raise TunnelError(str(e)) from e
        if not tunnel.public_url:
            raise TunnelError("tunnel has no public URL")
        self._public_url = tunnel.public_url
        logger.debug("Tunnel {} -> localhost:{}", tunnel.public_url, self._config.tunnel_port)
        return tunnel.public_url

    def wait(self) -> None:
        """Block until the ngrok process exits.

        Raises TunnelError when ngrok dies on its own with a failure status.
        Being stopped by an interrupt or terminate signal counts as a close.
        """
        process = ngrok.get_ngrok_process()
        code = process.proc.wait()
        logger.debug("ngrok process exited with {}", code)
        if code and code not in _STOP_CODES:
            raise TunnelError(f"ngrok exited with {code}")

    def close(self) -> None:
        """Disconnect the tunnel and stop the ngrok process."""
        if self._public_url is not None:
            try:
                ngrok.disconnect(self._public_url)
            except PyngrokError as e:
                logger.warning("Failed to disconnect tunnel: {}", e)
            self._public_url = None
        ngrok.kill()

    def run(self) -> None:
        """Open the tunnel, announce it, and wait for it to close."""
        url = self.open()
        console = self._display.console
        console.print(f"Tunnel URL: {url}")
        console.print("Tunnel is active. Press Ctrl+C to stop.")
        try:
            self.wait()
        except PyngrokError as e:
            raise TunnelError(str(e)) from e
        console.print("Tunnel closed")
