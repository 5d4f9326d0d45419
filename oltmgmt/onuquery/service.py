"""ONU lookup service, the public entry point for one OLT."""

from __future__ import annotations

import asyncio
import time
from typing import Callable, Optional

from loguru import logger

from oltmgmt.onuquery import constants
from oltmgmt.onuquery.cache import ResultCache
from oltmgmt.onuquery.exceptions import ContextError, OLTError
from oltmgmt.onuquery.models.config import DeviceConfig
from oltmgmt.onuquery.models.onu import (
    CapabilityInfo,
    LinkState,
    LookupOutcome,
    OnuInfo,
    OnuLookup,
    OnuStatus,
    OpticalInfo,
)
from oltmgmt.onuquery.navigator import ContextNavigator
from oltmgmt.onuquery.parsers import (
    parse_ctc_capability,
    parse_link_state,
    parse_onu_description,
    parse_onu_status,
    parse_optical_info,
)
from oltmgmt.onuquery.pool import PooledSession, SessionPool, TransportFactory, telnet_transport
from oltmgmt.onuquery.sync import PromptSynchronizer


class OnuQueryService:
    """Finds ONUs by description on one EPON OLT.

    One instance per device. It owns the device's session pool and result
    cache; concurrent lookups against the same device are serialized by an
    internal lock and share the pooled session.

    Usage::

        service = OnuQueryService(DeviceConfig(name="OLT1", host="10.0.0.2", password="pw", enable_password="en"))
        info = await service.get_onu_info("rogersaade")
        if info:
            print(info.onu_id, info.status.value)
        await service.close()
    """

    def __init__(
        self,
        config: DeviceConfig,
        transport_factory: TransportFactory = telnet_transport,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self._pool = SessionPool(config, transport_factory=transport_factory, clock=clock)
        self._cache: ResultCache[OnuInfo] = ResultCache(config.cache_ttl, clock=clock)
        self._lock = asyncio.Lock()

        logger.info(f"OnuQueryService initialized: {config.name} ({config.host}), enabled={config.enabled}")

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def pool(self) -> SessionPool:
        return self._pool

    @property
    def cache(self) -> ResultCache[OnuInfo]:
        return self._cache

    def is_enabled(self) -> bool:
        return self.config.enabled

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.debug(f"[{self.name}] ONU cache cleared")

    async def get_onu_info(self, description: str) -> Optional[OnuInfo]:
        """Return the ONU whose description matches, or None.

        None covers "not found", "unreachable" and "disabled"; use
        :meth:`lookup` to tell them apart.
        """
        result = await self.lookup(description)
        return result.onu

    async def lookup(self, description: str) -> OnuLookup:
        """Search every EPON port for an ONU with this description.

        The match is case-insensitive. Cached results younger than the cache
        TTL are returned without touching the device.
        """
        if not self.config.enabled:
            logger.warning(f"[{self.name}] service is disabled")
            return OnuLookup(outcome=LookupOutcome.DISABLED)

        key = description.strip().lower()
        cached = self._cache.get(self.name, key)
        if cached is not None:
            return OnuLookup(outcome=LookupOutcome.FOUND, onu=cached.model_copy(deep=True))

        async with self._lock:
            # another lookup may have filled the cache while we waited
            cached = self._cache.get(self.name, key)
            if cached is not None:
                return OnuLookup(outcome=LookupOutcome.FOUND, onu=cached.model_copy(deep=True))

            logger.info(f"[{self.name}] searching for ONU {description!r}")
            try:
                session = await self._pool.acquire()
                info = await self._search(session, key)
            except OLTError as e:
                logger.error(f"[{self.name}] failed to query OLT for {description!r}: {e}")
                await self._pool.invalidate()
                return OnuLookup(outcome=LookupOutcome.UNREACHABLE, error=str(e))
            except BaseException:
                # cancelled mid-search: the CLI may be left inside an interface context
                logger.warning(f"[{self.name}] lookup for {description!r} aborted, dropping session")
                await self._pool.invalidate()
                raise
            self._pool.touch()

            if info is None:
                logger.warning(f"[{self.name}] ONU {description!r} not found on any port")
                return OnuLookup(outcome=LookupOutcome.NOT_FOUND)

            self._cache.put(self.name, key, info.model_copy(deep=True))

        logger.info(f"[{self.name}] ONU {description!r} found: {info.onu_id} {info.status.value}")
        return OnuLookup(outcome=LookupOutcome.FOUND, onu=info)

    async def list_onus(self, port: str) -> list[OnuInfo]:
        """List every ONU on ``port`` with its description.

        Descriptions that cannot be read come back as ``"N/A"``.

        Raises:
            DeviceUnreachableError: Connection or login failed.
            ContextError: The interface context could not be entered.
        """
        rows: list[OnuInfo] = []
        async with self._lock:
            try:
                session = await self._pool.acquire()
                navigator = ContextNavigator(self.config, session.sync)
                try:
                    await navigator.enter(port)
                except ContextError:
                    await self._exit_or_drop(navigator)
                    raise
                for onu in await self._read_port(session.sync):
                    onu_description = await self._read_description(session.sync, onu)
                    rows.append(
                        OnuInfo(
                            **onu.model_dump(),
                            description=onu_description or constants.NOT_AVAILABLE,
                            port=port,
                            olt_name=self.name,
                        )
                    )
                await self._exit_or_drop(navigator)
            except ContextError:
                self._pool.touch()
                raise
            except OLTError:
                await self._pool.invalidate()
                raise
            except BaseException:
                logger.warning(f"[{self.name}] listing EPON {port} aborted, dropping session")
                await self._pool.invalidate()
                raise
            self._pool.touch()
        return rows

    async def close(self) -> None:
        """Log out and drop the pooled session."""
        async with self._lock:
            await self._pool.close()

    async def force_disconnect(self) -> None:
        """Drop the pooled session immediately, without logging out."""
        logger.debug(f"[{self.name}] force disconnecting pooled session")
        await self._pool.invalidate()

    async def _search(self, session: PooledSession, key: str) -> Optional[OnuInfo]:
        navigator = ContextNavigator(self.config, session.sync)
        entered = 0

        for port in self.config.epon_ports:
            logger.debug(f"[{self.name}] searching port {port}")
            try:
                await navigator.enter(port)
            except ContextError as e:
                logger.warning(f"[{self.name}] {e}")
                await self._leave(navigator)
                continue
            entered += 1

            match: Optional[tuple[OnuStatus, str]] = None
            onus = await self._read_port(session.sync)
            logger.debug(f"[{self.name}] found {len(onus)} ONUs on port {port}")
            for onu in onus:
                onu_description = await self._read_description(session.sync, onu)
                if onu_description is not None and onu_description.lower() == key:
                    match = (onu, onu_description)
                    break
            await self._leave(navigator)

            if match is not None:
                onu, onu_description = match
                optical, link, capability = await self._fetch_details(navigator, session.sync, port, onu)
                return OnuInfo(
                    **onu.model_dump(),
                    description=onu_description,
                    port=port,
                    olt_name=self.name,
                    optical=optical,
                    link=link,
                    capability=capability,
                )

        if self.config.epon_ports and not entered:
            raise ContextError(f"No EPON port could be selected on {self.name}")
        return None

    async def _leave(self, navigator: ContextNavigator) -> None:
        """Back out to the exec prompt; an unknown CLI mode is a hard error."""
        if not await navigator.exit():
            raise ContextError(f"{self.name} did not return to the exec prompt")

    async def _exit_or_drop(self, navigator: ContextNavigator) -> None:
        """Back out to the exec prompt, dropping the pooled session if that fails."""
        if not await navigator.exit():
            logger.warning(f"[{self.name}] CLI context unknown, dropping session")
            await self._pool.invalidate()

    async def _read_port(self, sync: PromptSynchronizer) -> list[OnuStatus]:
        capture = await sync.send_and_expect(
            constants.CMD_SHOW_ONU_STATUS, constants.PRIVILEGED_PROMPT, self.config.command_timeout
        )
        return parse_onu_status(capture.text)

    async def _read_description(self, sync: PromptSynchronizer, onu: OnuStatus) -> Optional[str]:
        if onu.onu_index is None:
            return None
        capture = await sync.send_and_expect(
            constants.CMD_SHOW_ONU_DESCRIPTION.format(index=onu.onu_index),
            constants.PRIVILEGED_PROMPT,
            self.config.command_timeout,
        )
        return parse_onu_description(capture.text)

    async def _fetch_details(
        self,
        navigator: ContextNavigator,
        sync: PromptSynchronizer,
        port: str,
        onu: OnuStatus,
    ) -> tuple[Optional[OpticalInfo], Optional[LinkState], Optional[CapabilityInfo]]:
        if not self.config.fetch_details or onu.onu_index is None:
            return None, None, None

        try:
            await navigator.enter(port)
        except ContextError as e:
            logger.warning(f"[{self.name}] skipping details for {onu.onu_id}: {e}")
            await self._exit_or_drop(navigator)
            return None, None, None

        timeout = self.config.command_timeout
        index = onu.onu_index

        capture = await sync.send_and_expect(
            constants.CMD_SHOW_ONU_OPTICAL.format(index=index), constants.PRIVILEGED_PROMPT, timeout
        )
        optical = parse_optical_info(capture.text)

        capture = await sync.send_and_expect(
            constants.CMD_SHOW_ONU_LINKSTATE.format(index=index), constants.PRIVILEGED_PROMPT, timeout
        )
        link = parse_link_state(capture.text)

        capability = None
        if self.config.fetch_capabilities:
            capture = await sync.send_and_expect(
                constants.CMD_SHOW_ONU_CAPABILITY.format(index=index), constants.PRIVILEGED_PROMPT, timeout
            )
            capability = parse_ctc_capability(capture.text)

        await self._exit_or_drop(navigator)
        logger.debug(
            f"[{self.name}] details for {onu.onu_id}: optical={optical is not None}, link={link is not None}"
        )
        return optical, link, capability
