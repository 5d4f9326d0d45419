"""Directory of configured OLTs and router-interface routing."""

from __future__ import annotations

from typing import Any, Optional

from loguru import logger

from oltmgmt.onuquery.models.config import DeviceConfig
from oltmgmt.onuquery.service import OnuQueryService


def extract_onu_username(interface_name: str, olt_pattern: str) -> Optional[str]:
    """Extract the subscriber name from a router PPPoE interface name.

    Interfaces that terminate on an OLT carry its name somewhere in the
    middle and the subscriber as the last ``-`` separated segment, e.g.
    ``(VM-PPPoe4)-vlan1607-zone4-OLT1-eliehajjarb1`` -> ``eliehajjarb1``.

    Returns:
        The last segment, or None if ``olt_pattern`` does not occur in the
        interface name (case-insensitive) or the last segment is empty.
    """
    if not interface_name or not olt_pattern:
        return None
    if olt_pattern.lower() not in interface_name.lower():
        return None
    username = interface_name.rsplit("-", 1)[-1].strip()
    return username or None


class OltDirectory:
    """Holds one :class:`OnuQueryService` per configured OLT, keyed by name.

    Usage::

        directory = OltDirectory()
        directory.add(DeviceConfig(name="OLT1", host="10.0.0.2", password="pw", enable_password="en"))
        resolved = directory.resolve_interface("(VM-PPPoe4)-vlan1607-zone4-OLT1-eliehajjarb1")
        if resolved:
            service, username = resolved
            info = await service.get_onu_info(username)
    """

    def __init__(self) -> None:
        self._services: dict[str, OnuQueryService] = {}
        self._patterns: dict[str, str] = {}

    def add(self, config: DeviceConfig, pattern: Optional[str] = None, **kwargs: Any) -> OnuQueryService:
        """Create and register the service for ``config``.

        Args:
            config: Device configuration; ``config.name`` is the registry key.
            pattern: Substring identifying this OLT in router interface names
                (default: the device name).
            **kwargs: Passed to :class:`OnuQueryService` (transport factory, clock).

        Raises:
            ValueError: A device with the same name is already registered.
        """
        key = config.name.lower()
        if key in self._services:
            raise ValueError(f"OLT '{config.name}' is already registered")

        service = OnuQueryService(config, **kwargs)
        self._services[key] = service
        self._patterns[key] = pattern or config.name
        return service

    def get(self, name: str) -> OnuQueryService:
        """Return the service registered as ``name`` (case-insensitive).

        Raises:
            ValueError: If no such OLT is registered.
        """
        key = name.lower()
        if key not in self._services:
            available = ", ".join(self.names())
            raise ValueError(f"Unknown OLT '{name}'. Available: {available}")
        return self._services[key]

    def names(self) -> list[str]:
        """Return the sorted names of all registered OLTs."""
        return sorted(service.name for service in self._services.values())

    def resolve_interface(self, interface_name: str) -> Optional[tuple[OnuQueryService, str]]:
        """Pick the OLT serving a router interface and the ONU description to look up.

        Disabled OLTs are skipped.
        """
        for key, service in self._services.items():
            if not service.is_enabled():
                continue
            username = extract_onu_username(interface_name, self._patterns[key])
            if username:
                logger.debug(f"interface {interface_name!r} -> {service.name}, ONU {username!r}")
                return service, username
        return None

    async def close(self) -> None:
        """Close every pooled session."""
        for service in self._services.values():
            await service.close()

    def __len__(self) -> int:
        return len(self._services)
