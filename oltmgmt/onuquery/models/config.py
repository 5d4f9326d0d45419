"""Per-device connection configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from oltmgmt.onuquery import constants


class DeviceConfig(BaseModel):
    """Connection and query settings for one OLT.

    Constructed once per physical device and never mutated; the query
    service, its session pool and its cache all read from the same instance.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    host: str
    port: int = Field(default=constants.TELNET_PORT, ge=1, le=65535)
    username: str = "admin"
    password: str = Field(default="", repr=False)
    enable_password: str = Field(default="", repr=False)
    enabled: bool = True

    connect_timeout: float = Field(default=constants.CONNECT_TIMEOUT, gt=0)
    login_timeout: float = Field(default=constants.LOGIN_TIMEOUT, gt=0)
    prompt_timeout: float = Field(default=constants.PROMPT_TIMEOUT, gt=0)
    command_timeout: float = Field(default=constants.COMMAND_TIMEOUT, gt=0)
    context_timeout: float = Field(default=constants.CONTEXT_TIMEOUT, gt=0)
    poll_interval: float = Field(default=constants.POLL_INTERVAL, gt=0)
    command_delay: float = Field(default=constants.COMMAND_DELAY, ge=0)

    epon_ports: tuple[str, ...] = constants.EPON_PORTS
    session_ttl: float = Field(default=constants.SESSION_TTL, gt=0)
    cache_ttl: float = Field(default=constants.CACHE_TTL, gt=0)

    fetch_details: bool = True
    fetch_capabilities: bool = False
