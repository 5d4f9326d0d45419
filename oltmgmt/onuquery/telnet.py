"""Raw telnet transport over asyncio streams."""

from __future__ import annotations

import asyncio
import codecs
import re

from loguru import logger

from oltmgmt.onuquery import constants
from oltmgmt.onuquery.base.transport import BaseTransport
from oltmgmt.onuquery.exceptions import OLTConnectionError

# IAC WILL/WONT/DO/DONT <opt>, IAC SB ... IAC SE, a bare two-byte IAC command,
# IAC IAC (an escaped 0xFF data byte), or an unfinished sequence at the end
_TELNET_SEQUENCE = re.compile(
    rb"\xff(?:[\xfb-\xfe].|\xfa.*?\xff\xf0|[\xf0-\xf9\xff])"
    rb"|(?P<partial>\xff(?:[\xfb-\xfe]|\xfa(?:(?!\xff\xf0).)*)?\Z)",
    re.DOTALL,
)
_IAC_IAC = b"\xff\xff"


def strip_telnet_negotiation(data: bytes) -> tuple[bytes, bytes]:
    """Remove telnet IAC sequences from ``data``.

    ``IAC IAC`` collapses to a single 0xFF byte.

    Returns:
        Tuple of (clean bytes, incomplete trailing sequence to prepend to the
        next chunk).
    """
    pending = b""

    def _replace(match: re.Match[bytes]) -> bytes:
        nonlocal pending
        if match.group("partial") is not None:
            pending = match.group(0)
            return b""
        return b"\xff" if match.group(0) == _IAC_IAC else b""

    return _TELNET_SEQUENCE.sub(_replace, data), pending


class TelnetTransport(BaseTransport):
    """TCP transport for line-oriented OLT CLIs.

    A background reader task accumulates everything the device sends into the
    transport buffer; lines are sent CR-LF terminated. No telnet options are
    negotiated, inbound negotiation is dropped.
    """

    def __init__(
        self,
        host: str,
        port: int = constants.TELNET_PORT,
        connect_timeout: float = constants.CONNECT_TIMEOUT,
    ):
        super().__init__(host, port)
        self.connect_timeout = connect_timeout
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._pump_task: asyncio.Task[None] | None = None
        self._pending = b""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._eof = False

    async def connect(self) -> None:
        """Open the TCP connection and start buffering inbound data."""
        logger.debug(f"Connecting to {self.host}:{self.port}")
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.connect_timeout,
            )
        except asyncio.TimeoutError as e:
            raise OLTConnectionError(f"Connection timeout to {self.host}:{self.port}") from e
        except OSError as e:
            raise OLTConnectionError(f"Connection to {self.host}:{self.port} failed: {e}") from e

        self.clear()
        self._pending = b""
        self._decoder.reset()
        self._eof = False
        self._pump_task = asyncio.create_task(self._pump())
        logger.debug(f"Connected to {self.host}:{self.port}")

    async def disconnect(self) -> None:
        """Stop the reader task and close the socket."""
        if self._pump_task:
            self._pump_task.cancel()
            try:
                await self._pump_task
            except (asyncio.CancelledError, Exception):
                pass
            self._pump_task = None
        if self._writer:
            try:
                self._writer.close()
                await self._writer.wait_closed()
            except Exception:
                pass
            self._writer = None
        self._reader = None
        self.clear()

    def is_connected(self) -> bool:
        """Check if the socket is open and the peer has not closed it."""
        return self._writer is not None and not self._writer.is_closing() and not self._eof

    async def send_line(self, line: str) -> None:
        """Write ``line`` followed by CR-LF."""
        if not self.is_connected():
            raise OLTConnectionError(f"Not connected to {self.host}:{self.port}")
        assert self._writer is not None
        try:
            self._writer.write((line + constants.LINE_ENDING).encode("ascii", errors="replace"))
            await self._writer.drain()
        except OSError as e:
            raise OLTConnectionError(f"Write to {self.host}:{self.port} failed: {e}") from e

    async def _pump(self) -> None:
        assert self._reader is not None
        try:
            while True:
                chunk = await self._reader.read(constants.BUFFER_SIZE)
                if not chunk:
                    logger.debug(f"Connection closed by {self.host}:{self.port}")
                    break
                clean, self._pending = strip_telnet_negotiation(self._pending + chunk)
                text = self._decoder.decode(clean)
                if text:
                    self.feed(text)
        except OSError as e:
            logger.warning(f"Socket error from {self.host}:{self.port}: {e}")
        finally:
            self._eof = True
