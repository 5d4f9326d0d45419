"""Pydantic models for ONU records parsed from OLT CLI output."""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from oltmgmt.onuquery.constants import NOT_AVAILABLE

_ONU_ID_RE = re.compile(r"^EPON(\d+/\d+):(\d+)$", re.IGNORECASE)


class OnuState(str, Enum):
    ONLINE = "Online"
    OFFLINE = "Offline"


class LookupOutcome(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    UNREACHABLE = "unreachable"
    DISABLED = "disabled"


class OnuStatus(BaseModel):
    """One row of ``show onu status``."""

    onu_id: str  # e.g. "EPON0/1:3"
    status: OnuState
    mac_address: str
    distance_meters: int
    rtt: int  # round trip time in TQ
    last_reg_time: str = NOT_AVAILABLE
    last_dereg_time: str = NOT_AVAILABLE
    last_dereg_reason: str = NOT_AVAILABLE
    alive_time: str = NOT_AVAILABLE

    @property
    def epon_port(self) -> Optional[str]:
        """EPON port of the ONU, e.g. ``0/1``."""
        match = _ONU_ID_RE.match(self.onu_id)
        return match.group(1) if match else None

    @property
    def onu_index(self) -> Optional[str]:
        """ONU index on its port, e.g. ``3`` for ``EPON0/1:3``."""
        match = _ONU_ID_RE.match(self.onu_id)
        return match.group(2) if match else None


class OpticalInfo(BaseModel):
    """Optical transceiver diagnostics from ``show onu <i> ctc opm_diag``."""

    temperature: str = NOT_AVAILABLE  # "37.00 °C"
    supply_voltage: str = NOT_AVAILABLE  # "3.31 V"
    bias_current: str = NOT_AVAILABLE  # "8.00 mA"
    transmit_power: str = NOT_AVAILABLE  # "1.63 mW (2.13 dBm)"
    receive_power: str = NOT_AVAILABLE  # "0.04 mW (-14.55 dBm)"


class LinkState(BaseModel):
    link_status: str  # "Up" / "Down"


class CapabilityInfo(BaseModel):
    """CTC capability block from ``show onu <i> ctc capability``."""

    ge_ports: str = NOT_AVAILABLE
    fe_ports: str = NOT_AVAILABLE
    pots_ports: str = NOT_AVAILABLE
    protection_type: str = NOT_AVAILABLE


class OnuInfo(OnuStatus):
    """Status row plus description and optional per-ONU detail queries."""

    description: str
    port: str  # EPON port searched, e.g. "0/1"
    olt_name: str = ""
    optical: Optional[OpticalInfo] = None
    link: Optional[LinkState] = None
    capability: Optional[CapabilityInfo] = None


class OnuLookup(BaseModel):
    """Result of a lookup, keeping "unreachable" apart from "not found"."""

    outcome: LookupOutcome
    onu: Optional[OnuInfo] = None
    error: str = ""

    @property
    def found(self) -> bool:
        return self.outcome is LookupOutcome.FOUND
