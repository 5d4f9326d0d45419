"""Tests for ONU report and table rendering."""

import pytest

from oltmgmt.onuquery.formatters import format_onu_info, format_onu_table
from oltmgmt.onuquery.models.onu import LinkState, OnuInfo, OnuState, OpticalInfo


@pytest.fixture()
def sample_onu_info():
    """Factory fixture returning an OnuInfo with customizable fields."""

    def _make(**kwargs):
        defaults = dict(
            onu_id="EPON0/1:3",
            status=OnuState.ONLINE,
            mac_address="74:a0:63:7e:d6:a8",
            distance_meters=1436,
            rtt=972,
            last_reg_time="2024/03/01 10:00:00",
            alive_time="5 03:12:45",
            description="rogersaade",
            port="0/1",
            olt_name="OLT1",
        )
        defaults.update(kwargs)
        return OnuInfo(**defaults)

    return _make


class TestFormatOnuInfo:
    """Test the plain-text and HTML ONU report."""

    def test_plain_online(self, sample_onu_info):
        """An online ONU renders its identifiers, uptime and registration."""
        text = format_onu_info(sample_onu_info())

        lines = text.splitlines()
        assert lines[0] == "🟢 ONU Status: Online"
        assert "  - ONU ID: EPON0/1:3" in lines
        assert "  - MAC: 74:a0:63:7e:d6:a8" in lines
        assert "  - Distance: 1436m" in lines
        assert "  - Uptime: 5 03:12:45" in lines
        assert "  - Last Registration: 2024/03/01 10:00:00" in lines
        assert "Last Offline" not in text
        assert "Optical Info" not in text
        assert "<b>" not in text

    def test_offline_with_reason(self, sample_onu_info):
        """An offline ONU shows the last offline time with its reason."""
        text = format_onu_info(
            sample_onu_info(
                status=OnuState.OFFLINE,
                last_dereg_time="2024/03/02 09:15:30",
                last_dereg_reason="power off",
            )
        )

        assert text.startswith("🔴 ONU Status: Offline")
        assert "  - Last Offline: 2024/03/02 09:15:30 (power off)" in text.splitlines()

    def test_offline_without_reason(self, sample_onu_info):
        """An N/A reason is left out."""
        text = format_onu_info(sample_onu_info(last_dereg_time="2024/03/02 09:15:30"))
        assert "  - Last Offline: 2024/03/02 09:15:30" in text.splitlines()

    def test_registration_hidden_when_unknown(self, sample_onu_info):
        """An N/A registration time is not printed."""
        text = format_onu_info(sample_onu_info(last_reg_time="N/A"))
        assert "Last Registration" not in text

    @pytest.mark.parametrize("status, emoji", [("Up", "🔗"), ("Down", "⛓️‍💥")])
    def test_link_line(self, sample_onu_info, status, emoji):
        """Link state appears right below the status line."""
        text = format_onu_info(sample_onu_info(link=LinkState(link_status=status)))
        assert text.splitlines()[1] == f"{emoji} Link Status: {status}"

    def test_optical_section(self, sample_onu_info):
        """Optical diagnostics get their own section."""
        optical = OpticalInfo(
            temperature="37.00 °C",
            supply_voltage="3.31 V",
            bias_current="8.00 mA",
            transmit_power="1.63 mW (2.13 dBm)",
            receive_power="0.04 mW (-14.55 dBm)",
        )
        lines = format_onu_info(sample_onu_info(optical=optical)).splitlines()

        title = lines.index("💡 Optical Info:")
        assert lines[title - 1] == ""
        assert lines[title + 1 :] == [
            "  - Temperature: 37.00 °C",
            "  - Voltage: 3.31 V",
            "  - Bias Current: 8.00 mA",
            "  - TX Power: 1.63 mW (2.13 dBm)",
            "  - RX Power: 0.04 mW (-14.55 dBm)",
        ]

    def test_html(self, sample_onu_info):
        """HTML output bolds labels and wraps identifiers in code tags."""
        html = format_onu_info(sample_onu_info(link=LinkState(link_status="Up")), html=True)

        assert html.splitlines()[0] == "🟢 <b>ONU Status:</b> Online"
        assert "🔗 <b>Link Status:</b> Up" in html
        assert "  - <b>ONU ID:</b> <code>EPON0/1:3</code>" in html
        assert "  - <b>MAC:</b> <code>74:a0:63:7e:d6:a8</code>" in html

    def test_html_escapes_values(self, sample_onu_info):
        """Device text is HTML-escaped."""
        html = format_onu_info(
            sample_onu_info(last_dereg_time="2024/03/02 09:15:30", last_dereg_reason="<dying gasp>"),
            html=True,
        )
        assert "(&lt;dying gasp&gt;)" in html


class TestFormatOnuTable:
    """Test the tabulate listing."""

    def test_rows_and_headers(self, sample_onu_info):
        """Every ONU becomes one row under the header."""
        table = format_onu_table(
            [
                sample_onu_info(),
                sample_onu_info(onu_id="EPON0/1:4", description="alice", status=OnuState.OFFLINE),
            ]
        )
        lines = table.splitlines()

        assert "ONU ID" in lines[0]
        assert "Description" in lines[0]
        assert len(lines) == 4
        assert "rogersaade" in lines[2]
        assert "EPON0/1:4" in lines[3]
        assert "Offline" in lines[3]

    def test_empty(self):
        """An empty list still renders headers."""
        assert "ONU ID" in format_onu_table([])
