"""EPON OLT management library.

Queries ONU status from EPON OLT head-ends over their telnet CLI: login and
enable, interface navigation, tolerant output parsing, a per-device session
pool and a result cache.
"""

__version__ = "0.1.0"

import os
import sys
from typing import Any, Callable, Dict

from loguru import logger as glogger

glogger.disable(__name__)


def _loguru_skiplog_filter(record: dict) -> bool:  # type: ignore[type-arg]
    """Filter function to hide records with ``extra['skiplog']`` set."""
    return not record.get("extra", {}).get("skiplog", False)


def configure_logging(
    loguru_filter: Callable[[Dict[str, Any]], bool] = _loguru_skiplog_filter,
) -> None:
    """Configure a default ``loguru`` sink with a convenient format and filter."""
    os.environ["LOGURU_LEVEL"] = os.getenv("LOGURU_LEVEL", "DEBUG")
    glogger.remove()
    logger_fmt: str = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{module}</cyan>::<cyan>{extra[classname]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )
    glogger.add(sys.stderr, level=os.getenv("LOGURU_LEVEL"), format=logger_fmt, filter=loguru_filter)  # type: ignore[arg-type]
    glogger.configure(extra={"classname": "None", "skiplog": False})
    glogger.enable(__name__)


from oltmgmt.onuquery.directory import OltDirectory  # noqa: E402
from oltmgmt.onuquery.exceptions import (  # noqa: E402
    AuthenticationError,
    ContextError,
    DeviceUnreachableError,
    OLTConnectionError,
    OLTError,
    ParseError,
)
from oltmgmt.onuquery.formatters import format_onu_info  # noqa: E402
from oltmgmt.onuquery.models import DeviceConfig, OnuInfo, OnuLookup  # noqa: E402
from oltmgmt.onuquery.service import OnuQueryService  # noqa: E402

__all__ = [
    "glogger",
    "configure_logging",
    "OnuQueryService",
    "OltDirectory",
    "DeviceConfig",
    "OnuInfo",
    "OnuLookup",
    "format_onu_info",
    "OLTError",
    "OLTConnectionError",
    "AuthenticationError",
    "ContextError",
    "ParseError",
    "DeviceUnreachableError",
]
