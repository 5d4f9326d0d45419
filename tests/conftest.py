"""Shared fixtures for the oltmgmt test suite."""

from __future__ import annotations

import re
from dataclasses import dataclass

import pytest

from oltmgmt.onuquery.base.transport import BaseTransport
from oltmgmt.onuquery.exceptions import OLTConnectionError
from oltmgmt.onuquery.models.config import DeviceConfig

# ── device output fixtures ────────────────────────────────────────────

STATUS_HEADER = (
    "ONU-ID      Status    MAC  Address         Distance(m)  RTT(TQ) LastRegTime             "
    "LastDeregTime           LastDeregReason    AliveTime    Upgrade\r\n"
    "----------  -------   -----------------    -----------  ------- -------------------     "
    "-------------------     ---------------    ----------   -------"
)

OPTICAL_OUTPUT = (
    " Temprature      : 37.00 C\r\n"
    " Supply Votage   : 3.31 V\r\n"
    " TX Bias Current : 8.00 mA\r\n"
    " TX Power        : 1.63 mW (2.13 dBm)\r\n"
    " RX Power        : 0.04 mW (-14.55 dBm)"
)

CAPABILITY_OUTPUT = (
    " GE Ports        : 1\r\n"
    " FE Ports        : 0\r\n"
    " POTS Ports      : 2\r\n"
    " Protction Type  : none"
)


@dataclass
class FakeOnu:
    """One ONU as the fake OLT reports it."""

    index: int
    description: str
    mac: str = "74:a0:63:00:00:01"
    online: bool = True
    distance: int = 1200
    rtt: int = 800
    last_reg: str = "2024/03/01 10:00:00"
    last_dereg: str = "N/A"
    reason: str = "N/A"
    alive: str = "5 03:12:45"
    link_up: bool = True

    def status_line(self, port: str) -> str:
        state = "online" if self.online else "offline"
        alive = self.alive if self.online else "N/A"
        return (
            f"EPON{port}:{self.index:<3} {state:<9} {self.mac:<20} {self.distance:<12} {self.rtt:<7} "
            f"{self.last_reg:<23} {self.last_dereg:<23} {self.reason:<18} {alive:<12} N/A"
        )


def default_onus() -> dict[str, list[FakeOnu]]:
    return {
        "0/1": [
            FakeOnu(1, "alice", mac="74:a0:63:11:22:01"),
            FakeOnu(
                2,
                "bob",
                mac="74:a0:63:11:22:02",
                online=False,
                distance=0,
                rtt=0,
                last_dereg="2024/03/02 09:15:30",
                reason="power off",
            ),
            FakeOnu(3, "rogersaade", mac="74:a0:63:7e:d6:a8", distance=1436, rtt=972),
        ],
        "0/2": [FakeOnu(1, "charlie", mac="74:a0:63:22:33:01")],
        "0/3": [],
        "0/4": [FakeOnu(1, "Dave-Home", mac="74:a0:63:44:55:01")],
    }


class FakeOlt(BaseTransport):
    """Scripted in-memory EPON OLT speaking the CLI dialect over the transport ABC.

    Every reply is fed into the buffer synchronously from ``send_line``, so
    tests only wait when the script deliberately withholds a prompt.
    """

    _INTERFACE_RE = re.compile(r"^interface epon (\S+)$")
    _ONU_CMD_RE = re.compile(r"^show onu (\d+) (.+)$")

    def __init__(
        self,
        hostname: str = "OLT1",
        username: str = "admin",
        password: str = "secret",
        enable_password: str = "enpass",
        onus: dict[str, list[FakeOnu]] | None = None,
    ):
        super().__init__("10.0.0.2", 23)
        self.hostname = hostname
        self.username = username
        self.password = password
        self.enable_password = enable_password
        self.onus = default_onus() if onus is None else onus

        # scripted faults
        self.refuse = False
        self.greeting = True
        self.broken_enable = False
        self.withhold_privileged = False
        self.invalid_ports: set[str] = set()
        self.misroute: dict[str, str] = {}
        self.drop_on: str | None = None
        self.withhold_on: str | None = None

        self.commands: list[str] = []
        self.connects = 0
        self.logins = 0
        self._connected = False
        self._mode = "login"
        self._port: str | None = None

    # ── BaseTransport ──

    async def connect(self) -> None:
        if self.refuse:
            raise OLTConnectionError(f"Connection to {self.host}:{self.port} failed: refused")
        self.connects += 1
        self._connected = True
        self._mode = "login"
        self._port = None
        self.clear()
        if self.greeting:
            self.feed("\r\nWelcome to EPON OLT\r\nLogin: ")

    async def disconnect(self) -> None:
        self._connected = False
        self.clear()

    def is_connected(self) -> bool:
        return self._connected

    async def send_line(self, line: str) -> None:
        if not self._connected:
            raise OLTConnectionError(f"Not connected to {self.host}:{self.port}")
        self.commands.append(line)
        if self.drop_on is not None and line.startswith(self.drop_on):
            self._connected = False
            return
        if self.withhold_on is not None and line.startswith(self.withhold_on):
            # swallow the command once, the CLI stays in its current mode
            self.withhold_on = None
            return
        getattr(self, f"_on_{self._mode}")(line)

    # ── prompts ──

    @property
    def prompt(self) -> str:
        if self._mode == "user":
            return f"{self.hostname}> "
        if self._mode == "config":
            return f"{self.hostname}(config)# "
        if self._mode == "interface":
            return f"{self.hostname}(config-pon-{self._port})# "
        return f"{self.hostname}# "

    def _reply(self, line: str, body: str = "") -> None:
        text = f"{line}\r\n"
        if body:
            text += f"{body}\r\n"
        self.feed(text + self.prompt)

    # ── per-mode handlers ──

    def _on_login(self, line: str) -> None:
        self._mode = "password"
        self.feed(f"{line}\r\nPassword: ")

    def _on_password(self, line: str) -> None:
        if line != self.password:
            self._mode = "login"
            self.feed("\r\n% Authentication failed\r\nLogin: ")
            return
        self._mode = "user"
        self.feed(f"\r\n{self.prompt}")

    def _on_user(self, line: str) -> None:
        if line == "enable" and not self.broken_enable:
            self._mode = "enable_password"
            self.feed(f"{line}\r\nPassword: ")
            return
        self._reply(line, "% Unknown command.")

    def _on_enable_password(self, line: str) -> None:
        if line != self.enable_password or self.withhold_privileged:
            self._mode = "user"
            self.feed(f"\r\n% Access denied\r\n{self.prompt}")
            return
        self._mode = "exec"
        self.logins += 1
        self.feed(f"\r\n{self.prompt}")

    def _on_exec(self, line: str) -> None:
        if line == "configure terminal":
            self._mode = "config"
            self._reply(line)
        elif line in ("exit", "quit"):
            self.feed(f"{line}\r\nBye.\r\n")
            self._connected = False
        elif line == "terminal length 0":
            self._reply(line)
        else:
            self._reply(line, "% Unknown command.")

    def _on_config(self, line: str) -> None:
        match = self._INTERFACE_RE.match(line)
        if match:
            port = match.group(1)
            if port in self.invalid_ports:
                self._reply(line, "% Invalid interface.")
                return
            self._mode = "interface"
            self._port = self.misroute.get(port, port)
            self._reply(line)
        elif line == "exit":
            self._mode = "exec"
            self._reply(line)
        else:
            self._reply(line, "% Unknown command.")

    def _on_interface(self, line: str) -> None:
        if line == "exit":
            self._mode = "config"
            self._port = None
            self._reply(line)
            return
        if line == "show onu status":
            rows = [STATUS_HEADER] + [onu.status_line(self._port) for onu in self.onus.get(self._port, [])]
            self._reply(line, "\r\n".join(rows))
            return

        match = self._ONU_CMD_RE.match(line)
        onu = None
        if match:
            onu = next((o for o in self.onus.get(self._port, []) if o.index == int(match.group(1))), None)
        if onu is None:
            self._reply(line, "% ONU does not exist.")
            return

        query = match.group(2)
        if query == "description":
            self._reply(line, f" description : {onu.description}")
        elif query == "ctc opm_diag":
            self._reply(line, OPTICAL_OUTPUT)
        elif query == "ctc eth 1 linkstate":
            self._reply(line, f" Ethernet link state : {'up' if onu.link_up else 'down'}")
        elif query == "ctc capability":
            self._reply(line, CAPABILITY_OUTPUT)
        else:
            self._reply(line, "% Unknown command.")


class BufferTransport(BaseTransport):
    """Minimal transport: records sent lines, replies from a fixed table."""

    def __init__(self, replies: dict[str, str] | None = None):
        super().__init__("127.0.0.1", 23)
        self.replies = replies or {}
        self.sent: list[str] = []
        self.connected = True

    async def connect(self) -> None:
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    def is_connected(self) -> bool:
        return self.connected

    async def send_line(self, line: str) -> None:
        self.sent.append(line)
        if line in self.replies:
            self.feed(self.replies[line])


@dataclass
class FakeClock:
    """Manually advanced monotonic clock."""

    now: float = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ── fixtures ──────────────────────────────────────────────────────────


@pytest.fixture()
def device_config():
    """Factory fixture returning a DeviceConfig with test-speed timeouts."""

    def _make(**overrides):
        defaults = dict(
            name="OLT1",
            host="10.0.0.2",
            username="admin",
            password="secret",
            enable_password="enpass",
            connect_timeout=1.0,
            login_timeout=0.2,
            prompt_timeout=0.2,
            command_timeout=0.2,
            context_timeout=0.1,
            poll_interval=0.005,
            command_delay=0.0,
            session_ttl=300.0,
            cache_ttl=60.0,
        )
        defaults.update(overrides)
        return DeviceConfig(**defaults)

    return _make


@pytest.fixture()
def fake_olt():
    """A fresh scripted OLT with the default ONU population."""
    return FakeOlt()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def make_olt():
    """Factory fixture returning a FakeOlt; ``onus`` maps port -> list of FakeOnu."""

    def _make(**kwargs):
        return FakeOlt(**kwargs)

    return _make


@pytest.fixture()
def make_onu():
    """Factory fixture returning a FakeOnu row for custom OLT populations."""

    def _make(index, description, **kwargs):
        return FakeOnu(index, description, **kwargs)

    return _make


@pytest.fixture()
def buffer_transport():
    """Factory fixture returning a BufferTransport with an optional reply table."""

    def _make(replies=None):
        return BufferTransport(replies)

    return _make
