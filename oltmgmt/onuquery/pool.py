"""Per-device pool holding at most one authenticated CLI session."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from loguru import logger

from oltmgmt.onuquery import constants
from oltmgmt.onuquery.base.transport import BaseTransport
from oltmgmt.onuquery.exceptions import DeviceUnreachableError, OLTError
from oltmgmt.onuquery.models.config import DeviceConfig
from oltmgmt.onuquery.session import SessionLogin
from oltmgmt.onuquery.sync import PromptSynchronizer
from oltmgmt.onuquery.telnet import TelnetTransport

TransportFactory = Callable[[DeviceConfig], BaseTransport]


def telnet_transport(config: DeviceConfig) -> BaseTransport:
    """Default transport factory: raw telnet to ``config.host:config.port``."""
    return TelnetTransport(config.host, config.port, connect_timeout=config.connect_timeout)


@dataclass
class PooledSession:
    """An open transport plus its authentication state."""

    transport: BaseTransport
    sync: PromptSynchronizer
    authenticated: bool = False
    last_activity: float = 0.0


class SessionPool:
    """Keeps one logged-in session per device and rebuilds it when stale.

    A session is reused while it is connected, authenticated and has been idle
    for less than ``config.session_ttl`` seconds. Anything else (expiry, a
    dropped socket, an error reported through :meth:`invalidate`) leads to a
    full reconnect and login on the next :meth:`acquire`.
    """

    def __init__(
        self,
        config: DeviceConfig,
        transport_factory: TransportFactory = telnet_transport,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._config = config
        self._transport_factory = transport_factory
        self._clock = clock
        self._session: PooledSession | None = None

    @property
    def session(self) -> PooledSession | None:
        return self._session

    async def acquire(self) -> PooledSession:
        """Return a ready session, connecting and logging in if needed.

        Raises:
            DeviceUnreachableError: Connection or login failed. No session is
                left in the pool.
        """
        now = self._clock()
        session = self._session
        if session is not None and session.authenticated and session.transport.is_connected():
            idle = now - session.last_activity
            if idle < self._config.session_ttl:
                logger.debug(f"[{self._config.name}] reusing pooled session (idle {idle:.1f}s)")
                session.last_activity = now
                return session
            logger.debug(f"[{self._config.name}] pooled session expired after {idle:.1f}s, reconnecting")

        await self.invalidate()

        transport = self._transport_factory(self._config)
        sync = PromptSynchronizer(
            transport,
            poll_interval=self._config.poll_interval,
            command_delay=self._config.command_delay,
        )
        try:
            await transport.connect()
            await SessionLogin(self._config, sync).run()
        except OLTError as e:
            logger.error(f"[{self._config.name}] failed to establish session: {e}")
            await transport.disconnect()
            raise DeviceUnreachableError(
                f"{self._config.name} ({self._config.host}) unreachable: {e}", device=self._config.name
            ) from e

        self._session = PooledSession(transport=transport, sync=sync, authenticated=True, last_activity=self._clock())
        logger.debug(f"[{self._config.name}] new pooled session established")
        return self._session

    def touch(self) -> None:
        """Mark the pooled session as used now."""
        if self._session is not None:
            self._session.last_activity = self._clock()

    async def invalidate(self) -> None:
        """Drop the pooled session without talking to the device."""
        session, self._session = self._session, None
        if session is not None:
            await session.transport.disconnect()

    async def close(self) -> None:
        """Log out politely (``quit``) and drop the session."""
        session = self._session
        if session is not None and session.transport.is_connected():
            try:
                await session.transport.send_line(constants.CMD_QUIT)
            except OLTError as e:
                logger.debug(f"[{self._config.name}] quit failed: {e}")
        await self.invalidate()
