"""Data models for ONU queries."""

from oltmgmt.onuquery.models.config import DeviceConfig
from oltmgmt.onuquery.models.onu import (
    CapabilityInfo,
    LinkState,
    LookupOutcome,
    OnuInfo,
    OnuLookup,
    OnuState,
    OnuStatus,
    OpticalInfo,
)

__all__ = [
    "DeviceConfig",
    "OnuState",
    "OnuStatus",
    "OnuInfo",
    "OnuLookup",
    "LookupOutcome",
    "OpticalInfo",
    "LinkState",
    "CapabilityInfo",
]
