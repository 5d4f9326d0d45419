"""ONU query: EPON OLT status lookup over the telnet CLI."""

from oltmgmt.onuquery.base.transport import BaseTransport
from oltmgmt.onuquery.cache import ResultCache
from oltmgmt.onuquery.directory import OltDirectory, extract_onu_username
from oltmgmt.onuquery.exceptions import (
    AuthenticationError,
    ContextError,
    DeviceUnreachableError,
    OLTConnectionError,
    OLTError,
    ParseError,
)
from oltmgmt.onuquery.formatters import format_onu_info, format_onu_table
from oltmgmt.onuquery.pool import SessionPool
from oltmgmt.onuquery.service import OnuQueryService
from oltmgmt.onuquery.telnet import TelnetTransport

__all__ = [
    "OnuQueryService",
    "OltDirectory",
    "extract_onu_username",
    "SessionPool",
    "ResultCache",
    "BaseTransport",
    "TelnetTransport",
    "format_onu_info",
    "format_onu_table",
    "OLTError",
    "OLTConnectionError",
    "AuthenticationError",
    "ContextError",
    "ParseError",
    "DeviceUnreachableError",
]
