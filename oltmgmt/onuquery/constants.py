"""CLI commands, prompt patterns and defaults for EPON OLTs."""

from __future__ import annotations

import re

# Default search order for EPON ports
EPON_PORTS: tuple[str, ...] = ("0/1", "0/2", "0/3", "0/4")

TELNET_PORT = 23
BUFFER_SIZE = 4096
LINE_ENDING = "\r\n"

# Timeouts (seconds)
CONNECT_TIMEOUT = 20.0
LOGIN_TIMEOUT = 10.0
PROMPT_TIMEOUT = 6.0
COMMAND_TIMEOUT = 5.0
CONTEXT_TIMEOUT = 2.0
POLL_INTERVAL = 0.1
COMMAND_DELAY = 0.2

# Pool / cache lifetimes (seconds)
SESSION_TTL = 300.0
CACHE_TTL = 300.0

# Prompt patterns; anchored at buffer end so output lines never match early
LOGIN_PROMPT = re.compile(r"Login:\s*$", re.IGNORECASE)
PASSWORD_PROMPT = re.compile(r"Password:\s*$", re.IGNORECASE)
USER_PROMPT = re.compile(r"[^\r\n]*>\s*$")
PRIVILEGED_PROMPT = re.compile(r"[^\r\n]*#\s*$")
EXEC_PROMPT = re.compile(r"(?<!\))#\s*$")
CONFIG_PROMPT = re.compile(r"[^\r\n]*\(config\)#\s*$")
INTERFACE_PROMPT = re.compile(r"[^\r\n]*\(config-pon-[^)]*\)#\s*$")

# CLI commands
CMD_ENABLE = "enable"
CMD_TERMINAL_LENGTH_0 = "terminal length 0"
CMD_CONFIGURE = "configure terminal"
CMD_INTERFACE = "interface epon {port}"
CMD_EXIT = "exit"
CMD_QUIT = "quit"
CMD_SHOW_ONU_STATUS = "show onu status"
CMD_SHOW_ONU_DESCRIPTION = "show onu {index} description"
CMD_SHOW_ONU_OPTICAL = "show onu {index} ctc opm_diag"
CMD_SHOW_ONU_LINKSTATE = "show onu {index} ctc eth 1 linkstate"
CMD_SHOW_ONU_CAPABILITY = "show onu {index} ctc capability"

NOT_AVAILABLE = "N/A"
