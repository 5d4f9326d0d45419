"""Prompt synchronization: the expect-style primitive everything else waits on."""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from typing import Callable

from loguru import logger

from oltmgmt.onuquery import constants
from oltmgmt.onuquery.base.transport import BaseTransport


async def wait_until(
    predicate: Callable[[], bool],
    timeout: float,
    poll_interval: float = constants.POLL_INTERVAL,
) -> bool:
    """Poll ``predicate`` until it returns True or ``timeout`` elapses.

    Returns:
        True on the first true predicate, False on timeout. Never raises on
        timeout.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        if predicate():
            return True
        remaining = deadline - loop.time()
        if remaining <= 0:
            return False
        await asyncio.sleep(min(poll_interval, remaining))


@dataclass
class Capture:
    """Text received between two synchronization points."""

    text: str
    matched: bool
    prompt: str = ""

    @property
    def raw(self) -> str:
        """Captured text including the matched prompt."""
        return self.text + self.prompt


class PromptSynchronizer:
    """Waits for prompt patterns in a transport buffer.

    Each synchronization consumes what it returns: on a match the buffer is
    consumed up to the end of the prompt, on timeout it is cleared. Nothing is
    delivered twice.
    """

    def __init__(
        self,
        transport: BaseTransport,
        poll_interval: float = constants.POLL_INTERVAL,
        command_delay: float = 0.0,
    ):
        self._transport = transport
        self.poll_interval = poll_interval
        self.command_delay = command_delay

    async def expect(self, pattern: re.Pattern[str], timeout: float) -> Capture:
        """Wait for ``pattern`` to appear in the buffer.

        Args:
            pattern: Compiled prompt regex.
            timeout: Maximum seconds to wait.

        Returns:
            Capture with the text before the prompt and the prompt itself, or
            everything received so far with ``matched=False`` on timeout or
            when the peer closed the connection.
        """
        match: re.Match[str] | None = None

        def _ready() -> bool:
            nonlocal match
            match = pattern.search(self._transport.peek())
            return match is not None or not self._transport.is_connected()

        await wait_until(_ready, timeout, self.poll_interval)

        if match is not None:
            data = self._transport.consume(match.end())
            return Capture(text=data[: match.start()], matched=True, prompt=match.group(0))

        data = self._transport.consume()
        logger.debug(f"No match for {pattern.pattern!r} after {timeout}s, got: {data[-200:]!r}")
        return Capture(text=data, matched=False)

    async def send_and_expect(
        self,
        line: str,
        pattern: re.Pattern[str],
        timeout: float,
    ) -> Capture:
        """Send one line, then wait for ``pattern``."""
        if self.command_delay:
            await asyncio.sleep(self.command_delay)
        await self._transport.send_line(line)
        return await self.expect(pattern, timeout)
