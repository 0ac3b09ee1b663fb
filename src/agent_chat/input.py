"""Line-oriented user input from a chunked text stream."""

from __future__ import annotations

import asyncio
import codecs
import contextlib
import os
import sys
import threading
from collections.abc import AsyncIterable, AsyncIterator, Callable

from loguru import logger

from agent_chat.models import EndOfInput, EndReason, InputLine, InputSignal

SENTINELS = frozenset({"exit", "quit"})

_CHUNK_SIZE = 4096


def classify(line: str) -> InputSignal | None:
    """Decide what one raw line means.

    Returns None for blank lines, an end signal for a sentinel, and an
    InputLine otherwise.
    """
    text = line.strip()
    if not text:
        return None
    if text in SENTINELS:
        return EndOfInput(reason=EndReason.SENTINEL)
    return InputLine(text=text)


class UserInputSource:
    """Turns a stream of arbitrary text chunks into trimmed input lines.

    A pump task copies chunks into an unbounded queue as soon as they
    arrive, so input typed while the agent is busy is kept until the next
    read.
    """

    def __init__(
        self,
        chunks: AsyncIterable[str],
        on_prompt: Callable[[], None] | None = None,
    ) -> None:
        self._chunks = chunks
        self._on_prompt = on_prompt
        self._queue: asyncio.Queue[str | None] = asyncio.Queue()
        self._buffer = ""
        self._pump: asyncio.Task[None] | None = None
        self._closed = False
        self._end: EndOfInput | None = None

    @property
    def ended(self) -> EndOfInput | None:
        """The end signal, once the sequence has terminated."""
        return self._end

    async def __aenter__(self) -> UserInputSource:
        self.start()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    def start(self) -> None:
        """Begin buffering chunks in the background."""
        if self._pump is None:
            self._pump = asyncio.create_task(self._run_pump())

    async def close(self) -> None:
        """Stop the pump task and collect its outcome."""
        if self._pump is None:
            return
        if not self._pump.done():
            self._pump.cancel()
        try:
            await self._pump
        except asyncio.CancelledError:
            pass
        except Exception as e:
            # A failing input stream ends the conversation like a closed one
            logger.warning("Input stream failed: {}", e)

    async def _run_pump(self) -> None:
        try:
            async for chunk in self._chunks:
                self._queue.put_nowait(chunk)
        finally:
            self._queue.put_nowait(None)

    async def next_signal(self) -> InputSignal:
        """Wait for the next meaningful line or the end of input."""
        if self._end is not None:
            return self._end
        self.start()

        while True:
            if self._on_prompt is not None:
                self._on_prompt()
            line = await self._read_line()
            if line is None:
                logger.debug("Input stream closed")
                self._end = EndOfInput(reason=EndReason.CLOSED)
                return self._end

            signal = classify(line)
            if signal is None:
                continue
            if isinstance(signal, EndOfInput):
                logger.debug("Sentinel {!r} received", line.strip())
                self._end = signal
            return signal

    async def lines(self) -> AsyncIterator[str]:
        """Yield input lines until a sentinel or the stream closes."""
        while True:
            signal = await self.next_signal()
            if isinstance(signal, EndOfInput):
                return
            yield signal.text

    async def _read_line(self) -> str | None:
        """Return the next newline-terminated line, or None at end of stream.

        A trailing fragment without a terminator is dropped when the
        stream closes.
        """
        while "\n" not in self._buffer:
            if self._closed:
                return None
            chunk = await self._queue.get()
            if chunk is None:
                self._closed = True
                self._buffer = ""
                return None
            self._buffer += chunk

        line, self._buffer = self._buffer.split("\n", 1)
        return line


async def stdin_chunks(fd: int | None = None) -> AsyncIterator[str]:
    """Yield decoded chunks from standard input.

    The blocking read happens on a daemon thread so an interrupt never
    waits for the user to press enter. It reads the raw descriptor, not
    ``sys.stdin.buffer``: a thread parked inside the buffered reader holds
    its lock and aborts interpreter shutdown.
    """
    source_fd = fd if fd is not None else sys.stdin.fileno()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[bytes | None] = asyncio.Queue()

    def reader() -> None:
        try:
            while True:
                data = os.read(source_fd, _CHUNK_SIZE)
                if not data:
                    break
                loop.call_soon_threadsafe(queue.put_nowait, data)
        except (OSError, RuntimeError) as e:
            # RuntimeError: the loop closed while we were blocked
            logger.debug("stdin reader stopped: {}", e)
        finally:
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(queue.put_nowait, None)

    threading.Thread(target=reader, name="stdin-reader", daemon=True).start()

    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        data = await queue.get()
        if data is None:
            tail = decoder.decode(b"", final=True)
            if tail:
                yield tail
            return
        text = decoder.decode(data)
        if text:
            yield text
