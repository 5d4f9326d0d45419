"""``oltmgmt`` command: hands the remaining arguments to a sub-CLI.

Sub-commands:
  onu         ONU status lookup on EPON OLTs (telnet CLI)

Examples:
  oltmgmt onu --name OLT1 --host 10.0.0.2 \\
      --password <PW> --enable-password <EN> lookup rogersaade

  oltmgmt onu --host 10.0.0.2 --password <PW> list 0/1
"""

from __future__ import annotations

import os
import sys
from importlib import import_module

from tabulate import tabulate

from oltmgmt import __version__, configure_logging
from oltmgmt import glogger

COMMANDS = {
    "onu": ("oltmgmt.onuquery.cli", "ONU status lookup on EPON OLTs"),
}

BUILD_ENV_VARS = ("GITHUB_REF", "GITHUB_SHA", "BUILDTIME")


def _print_usage() -> None:
    print("usage: oltmgmt <command> [options]\n")
    print("Available commands:")
    for cmd, (_, desc) in COMMANDS.items():
        print(f"  {cmd:14s}  {desc}")
    print("\nRun 'oltmgmt <command> --help' for command-specific options.")


def _with_title(table: str, title: str) -> str:
    """Put a title row above a ``mixed_grid`` table."""
    top, *body = table.split("\n")
    width = len(top)
    header = [
        "┍" + "━" * (width - 2) + "┑",
        "│ " + title.center(width - 4) + " │",
        top.replace("┍", "┝").replace("┑", "┥").replace("┯", "┿"),
    ]
    return "\n".join(header + body)


def _print_startup_banner() -> None:
    rows = [
        ["version", __version__],
        ["python", sys.version.split()[0]],
        ["log level", os.environ.get("LOGURU_LEVEL", "DEBUG")],
        ["commands", ", ".join(COMMANDS)],
    ]
    for var in BUILD_ENV_VARS:
        val = os.environ.get(var)
        if val and not val.endswith("_is_undefined"):
            rows.append([var, val])

    banner = _with_title(tabulate(rows, tablefmt="mixed_grid"), "oltmgmt starting up")
    glogger.opt(raw=True).info("\n{}\n", banner)


def main() -> None:
    """Run the sub-CLI named by the first argument."""
    configure_logging()
    _print_startup_banner()

    argv = sys.argv[1:]
    if not argv or argv[0] in ("-h", "--help"):
        _print_usage()
        sys.exit(0 if argv else 1)

    command, rest = argv[0], argv[1:]
    if command not in COMMANDS:
        print(f"oltmgmt: unknown command '{command}'\n", file=sys.stderr)
        _print_usage()
        sys.exit(1)

    module_path, _ = COMMANDS[command]
    import_module(module_path).main(rest)


if __name__ == "__main__":
    main()
