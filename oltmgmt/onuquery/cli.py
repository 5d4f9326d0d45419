"""CLI entry point for ONU lookups on EPON OLTs, usable standalone.

Connection settings come from flags, falling back to environment variables:
  --host             OLT_HOST
  --port             OLT_PORT (default 23)
  --username         OLT_USERNAME (default admin)
  --password         OLT_PASSWORD
  --enable-password  OLT_ENABLE_PASSWORD

Examples:
  # Find the ONU whose description is "rogersaade", report as plain text
  oltmgmt-onu --name OLT1 --host 10.0.0.2 --password <PW> --enable-password <EN> lookup rogersaade

  # Same, as HTML for a chat bot
  oltmgmt-onu --host 10.0.0.2 lookup rogersaade --html

  # Table of every ONU on EPON 0/2
  oltmgmt-onu --host 10.0.0.2 list 0/2
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

from pydantic import ValidationError

from oltmgmt import configure_logging
from oltmgmt.onuquery.exceptions import ContextError, OLTError
from oltmgmt.onuquery.formatters import format_onu_info, format_onu_table
from oltmgmt.onuquery.models.config import DeviceConfig
from oltmgmt.onuquery.models.onu import LookupOutcome
from oltmgmt.onuquery.service import OnuQueryService

EXIT_NOT_FOUND = 1
EXIT_UNREACHABLE = 2


async def cmd_lookup(service: OnuQueryService, args: argparse.Namespace) -> int:
    """Look up one ONU by description and print its report."""
    result = await service.lookup(args.description)

    if result.outcome is LookupOutcome.FOUND and result.onu is not None:
        print(format_onu_info(result.onu, html=args.html))
        return 0
    if result.outcome is LookupOutcome.UNREACHABLE:
        print(f"Error: {service.name} unreachable: {result.error}", file=sys.stderr)
        return EXIT_UNREACHABLE
    if result.outcome is LookupOutcome.DISABLED:
        print(f"Error: {service.name} is disabled", file=sys.stderr)
        return EXIT_UNREACHABLE

    print(f"ONU '{args.description}' not found on {service.name}", file=sys.stderr)
    return EXIT_NOT_FOUND


async def cmd_list(service: OnuQueryService, args: argparse.Namespace) -> int:
    """List all ONUs on one EPON port."""
    onus = await service.list_onus(args.port_id)
    if not onus:
        print(f"No ONUs found on EPON {args.port_id} (or unable to parse output)")
        return 0
    print(format_onu_table(onus))
    return 0


def _parse_ports(value: str) -> tuple[str, ...]:
    """Parse a comma-separated port list, e.g. ``0/2, 0/1``."""
    return tuple(part.strip() for part in value.split(",") if part.strip())


async def _run(config: DeviceConfig, args: argparse.Namespace) -> int:
    service = OnuQueryService(config)
    try:
        if args.command == "lookup":
            return await cmd_lookup(service, args)
        return await cmd_list(service, args)
    finally:
        await service.close()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for ONU queries."""
    parser = argparse.ArgumentParser(
        prog="oltmgmt-onu",
        description="EPON OLT ONU status lookup over the telnet CLI",
    )
    parser.add_argument("--name", default="OLT", help="Device name used in logs and reports (default: OLT)")
    parser.add_argument("--host", default=os.environ.get("OLT_HOST"), help="OLT IP address or hostname")
    parser.add_argument(
        "--port",
        type=int,
        default=os.environ.get("OLT_PORT", "23"),
        help="Telnet port (default: 23)",
    )
    parser.add_argument(
        "--username", default=os.environ.get("OLT_USERNAME", "admin"), help="Login username (default: admin)"
    )
    parser.add_argument("--password", default=os.environ.get("OLT_PASSWORD", ""), help="Login password")
    parser.add_argument(
        "--enable-password", default=os.environ.get("OLT_ENABLE_PASSWORD", ""), help="Enable (privileged) password"
    )
    parser.add_argument(
        "--epon-ports",
        metavar="PORTS",
        help="Comma-separated EPON ports to search, in order (default: 0/1,0/2,0/3,0/4)",
    )
    parser.add_argument("--no-details", action="store_true", help="Skip optical and link state queries")
    parser.add_argument("--capabilities", action="store_true", help="Also query CTC capabilities")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # lookup
    lookup_parser = subparsers.add_parser("lookup", help="Find an ONU by description")
    lookup_parser.add_argument("description", help="ONU description (usually the subscriber username)")
    lookup_parser.add_argument("--html", action="store_true", help="Render the report as HTML")

    # list
    list_parser = subparsers.add_parser("list", help="List all ONUs on an EPON port")
    list_parser.add_argument("port_id", metavar="port", help="EPON port, e.g. 0/1")

    return parser


def main(args: list[str] | None = None) -> None:
    """Main entry point for the ONU query CLI."""
    parser = build_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        sys.exit(1)

    if not parsed.host:
        parser.error("--host is required (or set OLT_HOST)")

    if parsed.verbose:
        os.environ["LOGURU_LEVEL"] = "DEBUG"
        configure_logging()

    kwargs: dict = {
        "name": parsed.name,
        "host": parsed.host,
        "port": parsed.port,
        "username": parsed.username,
        "password": parsed.password,
        "enable_password": parsed.enable_password,
        "fetch_details": not parsed.no_details,
        "fetch_capabilities": parsed.capabilities,
    }
    if parsed.epon_ports:
        kwargs["epon_ports"] = _parse_ports(parsed.epon_ports)

    try:
        config = DeviceConfig(**kwargs)
    except ValidationError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        code = asyncio.run(_run(config, parsed))
    except ContextError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except OLTError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_UNREACHABLE)
    except KeyboardInterrupt:
        print("\nAborted.", file=sys.stderr)
        sys.exit(130)

    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
