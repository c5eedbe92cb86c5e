"""CLI entry point for bedrockping."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import TYPE_CHECKING

from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import ANSI, HTML

from bedrockping.client import PingClient, parse_address
from bedrockping.config import AppConfig, ServerConfig, load_config
from bedrockping.errors import PingError
from bedrockping.formatting import format_text

if TYPE_CHECKING:
    from prompt_toolkit.output import Output

    from bedrockping.protocol import UnconnectedPong


def _positive_float(value: str) -> float:
    """argparse type for timeouts: a float greater than zero."""
    try:
        number = float(value)
    except ValueError:
        msg = f"invalid number: {value!r}"
        raise argparse.ArgumentTypeError(msg) from None
    if number <= 0:
        msg = f"must be greater than 0, got {value}"
        raise argparse.ArgumentTypeError(msg)
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="bedrockping",
        description="Query a Minecraft Bedrock server with a RakNet unconnected ping",
    )
    parser.add_argument(
        "server",
        nargs="?",
        help="Server name (from config) or host[:port] (e.g., 10.0.0.112:19132)",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=None,
        help="Seconds to wait for the reply (default: from config, else 5)",
    )
    parser.add_argument(
        "--strict-magic",
        action="store_true",
        default=False,
        help="Reject replies whose RakNet magic is wrong",
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        default=False,
        help="Print the raw server id string instead of the report",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Strip formatting codes instead of converting to ANSI colors",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Log the exchange to stderr",
    )
    return parser


def resolve_server(
    server_arg: str | None, config: AppConfig
) -> tuple[str, ServerConfig]:
    """Resolve the target server from the CLI arg or the configured default.

    Returns (display_name, ServerConfig).

    Raises:
        SendError: If server_arg is neither a configured name nor a valid address.
    """
    if server_arg is not None:
        if server_arg in config.servers:
            return server_arg, config.servers[server_arg]

        host, port = parse_address(server_arg)
        return server_arg, ServerConfig(name=server_arg, host=host, port=port)

    if config.default_server and config.default_server in config.servers:
        key = config.default_server
        return key, config.servers[key]

    print(
        "Error: no server given and no default server configured.\n"
        "Pass host[:port], or set [defaults] server in "
        "~/.config/bedrockping/config.toml",
        file=sys.stderr,
    )
    sys.exit(1)


def _report_lines(pong: UnconnectedPong) -> list[tuple[str, str]]:
    status = pong.status
    return [
        ("Edition", status.edition),
        ("MOTD", status.motd),
        ("Version", f"{status.version_name} (protocol {status.protocol_version})"),
        ("Players", f"{status.player_count}/{status.max_player_count}"),
        ("Level", status.level_name),
        ("Game mode", f"{status.gamemode} ({status.gamemode_numeric})"),
        ("Ports", f"{status.port_v4} (IPv4), {status.port_v6} (IPv6)"),
        ("Server GUID", str(pong.server_guid)),
        ("Uptime", f"{pong.uptime_ms} ms"),
    ]


def print_report(
    header: str,
    pong: UnconnectedPong,
    *,
    color: bool,
    output: Output | None = None,
) -> None:
    """Print a human readable status report for a pong.

    output is passed to prompt_toolkit when color is on; None means stdout.
    """
    lines = _report_lines(pong)
    if color:
        print_formatted_text(HTML("<b>{}</b>").format(header), output=output)
        for label, value in lines:
            print_formatted_text(
                HTML("  <ansicyan>{}:</ansicyan>").format(label),
                ANSI(format_text(value, color=True)),
                output=output,
            )
    else:
        print(header)
        for label, value in lines:
            print(f"  {label}: {format_text(value, color=False)}")

    if not pong.status_parsed_ok:
        print(
            "Note: the server id string was incomplete, defaults were filled in",
            file=sys.stderr,
        )


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )

    try:
        config = load_config()
    except ValueError as e:
        print(f"Error: invalid config file: {e}", file=sys.stderr)
        sys.exit(1)
    timeout = args.timeout if args.timeout is not None else config.timeout

    try:
        display_name, server = resolve_server(args.server, config)
        client = PingClient(
            server.host,
            server.port,
            timeout=timeout,
            validate_magic=args.strict_magic,
        )
        pong = client.ping()
    except PingError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.raw:
        print(pong.status_raw)
        return

    print_report(f"{display_name} ({server.address})", pong, color=not args.no_color)
