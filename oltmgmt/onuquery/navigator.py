"""EPON interface context navigation."""

from __future__ import annotations

from loguru import logger

from oltmgmt.onuquery import constants
from oltmgmt.onuquery.exceptions import ContextError
from oltmgmt.onuquery.models.config import DeviceConfig
from oltmgmt.onuquery.sync import PromptSynchronizer


class ContextNavigator:
    """Enters and leaves ``interface epon <port>`` on the OLT CLI.

    ``depth`` counts the config levels entered so far (1 = config,
    2 = interface) so :meth:`exit` never sends ``exit`` from the exec prompt,
    which would end the login session.
    """

    def __init__(self, config: DeviceConfig, sync: PromptSynchronizer):
        self._config = config
        self._sync = sync
        self.current_port: str | None = None
        self.depth = 0

    async def enter(self, port: str) -> None:
        """Enter config mode, then the interface context of ``port``.

        Raises:
            ContextError: Config mode was not reached, or the interface prompt
                does not name ``port``.
        """
        timeout = self._config.context_timeout

        capture = await self._sync.send_and_expect(constants.CMD_CONFIGURE, constants.CONFIG_PROMPT, timeout)
        if not capture.matched:
            raise ContextError(f"No config prompt while selecting EPON {port}", port=port)
        self.depth = 1

        capture = await self._sync.send_and_expect(
            constants.CMD_INTERFACE.format(port=port), constants.INTERFACE_PROMPT, timeout
        )
        if capture.matched:
            self.depth = 2
        if f"config-pon-{port})" not in capture.prompt:
            logger.warning(f"[{self._config.name}] interface prompt mismatch for {port}: {capture.raw[-120:]!r}")
            raise ContextError(f"Failed to select interface EPON {port}", port=port)

        self.current_port = port

    async def exit(self) -> bool:
        """Leave any config context and return to the privileged exec prompt.

        Returns:
            True once the privileged exec prompt was observed, or when no
            context was entered.
        """
        self.current_port = None
        while self.depth > 0:
            capture = await self._sync.send_and_expect(
                constants.CMD_EXIT, constants.PRIVILEGED_PROMPT, self._config.context_timeout
            )
            if not capture.matched:
                logger.warning(f"[{self._config.name}] no prompt after exit: {capture.raw[-120:]!r}")
                self.depth = 0
                return False
            self.depth -= 1
            if constants.EXEC_PROMPT.search(capture.prompt):
                self.depth = 0
                return True
        return True
