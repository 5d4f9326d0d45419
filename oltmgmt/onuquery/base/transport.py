"""Abstract base transport for OLT CLI communication."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Self


class BaseTransport(ABC):
    """Abstract byte-stream transport with an inbound text buffer.

    The wire has no message framing: everything the device sends is appended
    to one buffer, and the prompt synchronizer decides when a response is
    complete by inspecting and consuming it.
    """

    def __init__(self, host: str, port: int):
        self.host = host
        self.port = port
        self._buffer = ""

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection to the device."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the device."""

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if transport is currently connected."""

    @abstractmethod
    async def send_line(self, line: str) -> None:
        """Send one command line, terminated the way the device expects."""

    def feed(self, text: str) -> None:
        """Append inbound text to the buffer."""
        self._buffer += text

    def peek(self) -> str:
        """Return the buffer without consuming it."""
        return self._buffer

    def consume(self, end: int | None = None) -> str:
        """Remove and return the buffer up to ``end`` (everything if None)."""
        if end is None:
            data, self._buffer = self._buffer, ""
        else:
            data, self._buffer = self._buffer[:end], self._buffer[end:]
        return data

    def clear(self) -> None:
        self._buffer = ""

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None
    ) -> None:
        await self.disconnect()
