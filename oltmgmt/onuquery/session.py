"""Login and privilege escalation on a freshly connected OLT."""

from __future__ import annotations

import re
from enum import Enum

from loguru import logger

from oltmgmt.onuquery import constants
from oltmgmt.onuquery.exceptions import AuthenticationError
from oltmgmt.onuquery.models.config import DeviceConfig
from oltmgmt.onuquery.sync import PromptSynchronizer


class LoginState(str, Enum):
    CONNECTED = "connected"
    USERNAME_SENT = "username_sent"
    PASSWORD_SENT = "password_sent"
    USER_MODE = "user_mode"
    ENABLE_SENT = "enable_sent"
    PRIVILEGED = "privileged"
    READY = "ready"
    FAILED = "failed"


class SessionLogin:
    """Drives login -> enable -> pagination off.

    Every step waits for one expected prompt with its own timeout. The first
    missing prompt moves the machine to ``FAILED`` and raises
    :class:`AuthenticationError`; no further lines are sent.

    Usage::

        login = SessionLogin(config, PromptSynchronizer(transport))
        await login.run()
        assert login.state is LoginState.READY
    """

    def __init__(self, config: DeviceConfig, sync: PromptSynchronizer):
        self._config = config
        self._sync = sync
        self.state = LoginState.CONNECTED

    async def run(self) -> LoginState:
        """Run the full sequence.

        Returns:
            ``LoginState.READY`` on success.

        Raises:
            AuthenticationError: An expected prompt was not observed.
        """
        cfg = self._config

        await self._expect(constants.LOGIN_PROMPT, cfg.login_timeout, "login prompt")

        self.state = LoginState.USERNAME_SENT
        await self._step(cfg.username, constants.PASSWORD_PROMPT, cfg.prompt_timeout, "password prompt")

        self.state = LoginState.PASSWORD_SENT
        await self._step(cfg.password, constants.USER_PROMPT, cfg.login_timeout, "user prompt")
        self.state = LoginState.USER_MODE

        await self._step(constants.CMD_ENABLE, constants.PASSWORD_PROMPT, cfg.prompt_timeout, "enable password prompt")
        self.state = LoginState.ENABLE_SENT
        await self._step(cfg.enable_password, constants.PRIVILEGED_PROMPT, cfg.login_timeout, "privileged prompt")
        self.state = LoginState.PRIVILEGED

        await self._step(
            constants.CMD_TERMINAL_LENGTH_0, constants.PRIVILEGED_PROMPT, cfg.prompt_timeout, "pagination disable"
        )
        self.state = LoginState.READY

        logger.debug(f"[{cfg.name}] authentication successful")
        return self.state

    async def _expect(self, pattern: re.Pattern[str], timeout: float, step: str) -> None:
        capture = await self._sync.expect(pattern, timeout)
        if not capture.matched:
            self._fail(step, capture.text)

    async def _step(self, line: str, pattern: re.Pattern[str], timeout: float, step: str) -> None:
        capture = await self._sync.send_and_expect(line, pattern, timeout)
        if not capture.matched:
            self._fail(step, capture.text)

    def _fail(self, step: str, response: str) -> None:
        failed_in = self.state
        self.state = LoginState.FAILED
        logger.error(f"[{self._config.name}] login failed at {failed_in.value}: no {step} (got {response[-200:]!r})")
        raise AuthenticationError(f"No {step} from {self._config.host} ({failed_in.value})", step=step)
