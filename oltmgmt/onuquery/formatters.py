"""Human-readable rendering of ONU records."""

from __future__ import annotations

import html as html_lib
from typing import Sequence

from tabulate import tabulate

from oltmgmt.onuquery.constants import NOT_AVAILABLE
from oltmgmt.onuquery.models.onu import OnuInfo, OnuState

STATUS_ONLINE = "🟢"
STATUS_OFFLINE = "🔴"
LINK_UP = "🔗"
LINK_DOWN = "⛓️‍💥"
OPTICAL = "💡"


def _available(value: str | None) -> bool:
    return bool(value) and value != NOT_AVAILABLE


def format_onu_info(info: OnuInfo, html: bool = False) -> str:
    """Render an ONU record as a short multi-line report.

    Registration and offline lines are only included when the OLT reported a
    timestamp; the optical section only when diagnostics were fetched. With
    ``html=True`` labels are wrapped in ``<b>`` and identifiers in ``<code>``
    (values are HTML-escaped), for chat front-ends.
    """

    def label(text: str) -> str:
        return f"<b>{text}:</b>" if html else f"{text}:"

    def value(text: object) -> str:
        return html_lib.escape(str(text)) if html else str(text)

    def code(text: object) -> str:
        return f"<code>{value(text)}</code>" if html else str(text)

    status_emoji = STATUS_ONLINE if info.status is OnuState.ONLINE else STATUS_OFFLINE
    lines = [f"{status_emoji} {label('ONU Status')} {info.status.value}"]

    if info.link is not None and info.link.link_status:
        link_emoji = LINK_UP if info.link.link_status == "Up" else LINK_DOWN
        lines.append(f"{link_emoji} {label('Link Status')} {value(info.link.link_status)}")

    lines.append(f"  - {label('ONU ID')} {code(info.onu_id)}")
    lines.append(f"  - {label('MAC')} {code(info.mac_address)}")
    lines.append(f"  - {label('Distance')} {info.distance_meters}m")
    lines.append(f"  - {label('Uptime')} {value(info.alive_time)}")

    if _available(info.last_reg_time):
        lines.append(f"  - {label('Last Registration')} {value(info.last_reg_time)}")

    if _available(info.last_dereg_time):
        offline = f"  - {label('Last Offline')} {value(info.last_dereg_time)}"
        if _available(info.last_dereg_reason):
            offline += f" ({value(info.last_dereg_reason)})"
        lines.append(offline)

    if info.optical is not None:
        o = info.optical
        title = f"<b>{OPTICAL} Optical Info:</b>" if html else f"{OPTICAL} Optical Info:"
        lines.extend(
            [
                "",
                title,
                f"  - {label('Temperature')} {value(o.temperature)}",
                f"  - {label('Voltage')} {value(o.supply_voltage)}",
                f"  - {label('Bias Current')} {value(o.bias_current)}",
                f"  - {label('TX Power')} {value(o.transmit_power)}",
                f"  - {label('RX Power')} {value(o.receive_power)}",
            ]
        )

    return "\n".join(lines)


def format_onu_table(onus: Sequence[OnuInfo], tablefmt: str = "simple") -> str:
    """Render ONU rows as a tabulate grid."""
    headers = ["ONU ID", "Description", "Status", "MAC", "Distance(m)", "Last Offline", "Reason", "Uptime"]
    rows = [
        [
            onu.onu_id,
            onu.description,
            onu.status.value,
            onu.mac_address,
            onu.distance_meters,
            onu.last_dereg_time,
            onu.last_dereg_reason,
            onu.alive_time,
        ]
        for onu in onus
    ]
    return tabulate(rows, headers=headers, tablefmt=tablefmt)
