"""Pure parsers for EPON OLT CLI output.

Every parser takes raw captured text and returns a model (or None). None of
them raise: a field that cannot be found becomes ``"N/A"``, and a block with
none of its defining labels yields None.
"""

from __future__ import annotations

import re
from typing import Optional

from loguru import logger

from oltmgmt.onuquery.constants import NOT_AVAILABLE
from oltmgmt.onuquery.exceptions import ParseError
from oltmgmt.onuquery.models.onu import (
    CapabilityInfo,
    LinkState,
    OnuState,
    OnuStatus,
    OpticalInfo,
)

# ── show onu status ────────────────────────────────────────────────────
#
# ONU-ID      Status    MAC  Address         Distance(m)  RTT(TQ) LastRegTime             LastDeregTime           LastDeregReason    AliveTime    Upgrade
# EPON0/1:1   online    74:a0:63:7e:d6:a8    1436         972     1907/12/27 01:26:01     N/A                     N/A               42 02:24:43  N/A

_STATUS_CORE = re.compile(
    r"^\s*(EPON\d+/\d+:\d+)\s+(online|offline)\s+([0-9a-f:]+)\s+(\d+)\s+(\d+)(?:\s+|$)",
    re.IGNORECASE,
)
_ALIVE_TIME = re.compile(r"(?<![\d/:])((?:\d+\s+)?\d{2}:\d{2}:\d{2})\s*(?:N/A)?\s*$", re.IGNORECASE)
_TIMESTAMP = r"(\d{4}/\d{2}/\d{2}\s+\d{2}:\d{2}:\d{2}|N/A)"
_LAST_REG = re.compile(r"^" + _TIMESTAMP, re.IGNORECASE)
_LAST_DEREG = re.compile(r"^\s+" + _TIMESTAMP, re.IGNORECASE)
# Reason text has no terminator: stop before the next digit run (AliveTime)
# or before the trailing N/A columns at end of line.
_DEREG_REASON = re.compile(
    r"^\s+([A-Za-z][A-Za-z\s/]*?)(?=\s+\d|\s+N/A(?:\s+N/A)?\s*$|\s*$)",
    re.IGNORECASE,
)


def parse_onu_status(output: str) -> list[OnuStatus]:
    """Parse ``show onu status`` into one OnuStatus per ONU row.

    Lines that do not start with the core columns (ID, state, MAC, distance,
    RTT) are skipped: headers, the echoed command and the trailing prompt.
    """
    onus: list[OnuStatus] = []
    for line in output.splitlines():
        core = _STATUS_CORE.match(line)
        if not core:
            continue

        alive = _ALIVE_TIME.search(line[core.end() :])
        alive_time = alive.group(1).strip() if alive else NOT_AVAILABLE

        last_reg_time = NOT_AVAILABLE
        last_dereg_time = NOT_AVAILABLE
        last_dereg_reason = NOT_AVAILABLE

        rest = line[core.end() :]
        reg = _LAST_REG.match(rest)
        if reg:
            last_reg_time = reg.group(1)
            rest = rest[reg.end() :]
            dereg = _LAST_DEREG.match(rest)
            if dereg:
                last_dereg_time = dereg.group(1)
                rest = rest[dereg.end() :]
                reason = _DEREG_REASON.match(rest)
                if reason and reason.group(1).strip():
                    last_dereg_reason = reason.group(1).strip()

        onus.append(
            OnuStatus(
                onu_id=core.group(1),
                status=OnuState.ONLINE if core.group(2).lower() == "online" else OnuState.OFFLINE,
                mac_address=core.group(3),
                distance_meters=int(core.group(4)),
                rtt=int(core.group(5)),
                last_reg_time=last_reg_time,
                last_dereg_time=last_dereg_time,
                last_dereg_reason=last_dereg_reason,
                alive_time=alive_time,
            )
        )

    return onus


# ── show onu <i> description ───────────────────────────────────────────

_DESCRIPTION = re.compile(r"^\s*description\s*:\s*(\S.*?)\s*$", re.IGNORECASE | re.MULTILINE)


def parse_onu_description(output: str) -> Optional[str]:
    """Parse ``description : rogersaade`` from ``show onu <i> description``."""
    match = _DESCRIPTION.search(output)
    return match.group(1) if match else None


# ── key:value blocks ───────────────────────────────────────────────────


def _label(*variants: str) -> str:
    """Build a label regex accepting each spelling, whitespace-tolerant."""
    return "(?:" + "|".join(r"\s*".join(re.escape(word) for word in v.split()) for v in variants) + r")\s*:\s*"


def _extract_block(output: str, fields: dict[str, re.Pattern[str]], block: str) -> dict[str, re.Match[str]]:
    """Search every field pattern in ``output``.

    Raises:
        ParseError: None of the patterns matched.
    """
    found = {}
    for name, pattern in fields.items():
        match = pattern.search(output)
        if match:
            found[name] = match
    if not found:
        raise ParseError(f"No {block} labels found")
    return found


# Temperature : 37.00 C
# Supply Voltage : 3.31 V
# TX Bias Current : 8.00 mA
# TX Power : 1.63 mW (2.13 dBm)
# RX Power : 0.04 mW (-14.55 dBm)
_OPTICAL_FIELDS = {
    "temperature": re.compile(
        _label("Temperature", "Temprature", "Tempreture") + r"(-?[\d.]+)\s*(?:°\s*)?C", re.IGNORECASE
    ),
    "supply_voltage": re.compile(_label("Supply Voltage", "Supply Votage") + r"([\d.]+)\s*V", re.IGNORECASE),
    "bias_current": re.compile(_label("TX Bias Current", "Bias Current") + r"([\d.]+)\s*mA", re.IGNORECASE),
    "transmit_power": re.compile(_label("TX Power") + r"([\d.]+)\s*mW\s*\(([-\d.]+)\s*dBm\)", re.IGNORECASE),
    "receive_power": re.compile(_label("RX Power") + r"([\d.]+)\s*mW\s*\(([-\d.]+)\s*dBm\)", re.IGNORECASE),
}


def parse_optical_info(output: str) -> Optional[OpticalInfo]:
    """Parse ``show onu <i> ctc opm_diag``."""
    try:
        found = _extract_block(output, _OPTICAL_FIELDS, "optical")
    except ParseError as e:
        logger.debug(f"{e}: {output[-200:]!r}")
        return None

    values: dict[str, str] = {}
    if "temperature" in found:
        values["temperature"] = f"{found['temperature'].group(1)} °C"
    if "supply_voltage" in found:
        values["supply_voltage"] = f"{found['supply_voltage'].group(1)} V"
    if "bias_current" in found:
        values["bias_current"] = f"{found['bias_current'].group(1)} mA"
    for key in ("transmit_power", "receive_power"):
        if key in found:
            values[key] = f"{found[key].group(1)} mW ({found[key].group(2)} dBm)"
    return OpticalInfo(**values)


_LINK_STATE = re.compile(r"(?:Ethernet\s*)?(?:link\s*)?state\s*:\s*(up|down)\b", re.IGNORECASE)
_LINK_WORD = re.compile(r"\b(up|down)\b", re.IGNORECASE)


def parse_link_state(output: str) -> Optional[LinkState]:
    """Parse ``show onu <i> ctc eth 1 linkstate``.

    Accepts ``Ethernet link state: up``, ``state: down`` or a bare up/down.
    """
    match = _LINK_STATE.search(output) or _LINK_WORD.search(output)
    if not match:
        logger.debug(f"No link state found: {output[-200:]!r}")
        return None
    return LinkState(link_status="Up" if match.group(1).lower() == "up" else "Down")


# Some CTC firmware prints "Protction Type" / "Protecion Type"
_CAPABILITY_FIELDS = {
    "ge_ports": re.compile(_label("GE Ports", "GE Port Number") + r"(\d+)", re.IGNORECASE),
    "fe_ports": re.compile(_label("FE Ports", "FE Port Number") + r"(\d+)", re.IGNORECASE),
    "pots_ports": re.compile(_label("POTS Ports", "POTS Port Number") + r"(\d+)", re.IGNORECASE),
    "protection_type": re.compile(
        _label("Protection Type", "Protction Type", "Protecion Type") + r"([^\r\n]*?)\s*$",
        re.IGNORECASE | re.MULTILINE,
    ),
}


def parse_ctc_capability(output: str) -> Optional[CapabilityInfo]:
    """Parse ``show onu <i> ctc capability``."""
    try:
        found = _extract_block(output, _CAPABILITY_FIELDS, "capability")
    except ParseError as e:
        logger.debug(f"{e}: {output[-200:]!r}")
        return None

    values = {name: match.group(1) for name, match in found.items() if match.group(1)}
    return CapabilityInfo(**values)
