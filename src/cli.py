"""CLI entry point for the Genius Hub MQTT bridge."""

import argparse
import asyncio
import sys
from pathlib import Path


def build_parser() -> tuple[argparse.ArgumentParser, argparse.ArgumentParser]:
    """Build the argument parser; also returns the config sub-parser."""
    parser = argparse.ArgumentParser(
        prog="genius-mqtt",
        description="Genius Hub MQTT bridge - sync heating zones with an MQTT broker",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Run the bridge")
    serve_parser.add_argument(
        "--config-dir",
        type=str,
        help="Path to config directory",
    )

    # zones command
    zones_parser = subparsers.add_parser("zones", help="Fetch and print the hub's zones once")
    zones_parser.add_argument(
        "--config-dir",
        type=str,
        help="Path to config directory",
    )
    zones_parser.add_argument(
        "--json",
        action="store_true",
        help="Print zones as JSON",
    )

    # scan command
    scan_parser = subparsers.add_parser("scan", help="Show what the bridge has published to MQTT")
    scan_parser.add_argument(
        "--host",
        type=str,
        default="localhost",
        help="MQTT broker host (default: localhost)",
    )
    scan_parser.add_argument(
        "--port",
        type=int,
        default=1883,
        help="MQTT broker port (default: 1883)",
    )
    scan_parser.add_argument(
        "--username",
        type=str,
        help="MQTT username",
    )
    scan_parser.add_argument(
        "--password",
        type=str,
        help="MQTT password",
    )
    scan_parser.add_argument(
        "--prefix",
        type=str,
        default="genius",
        help="Topic prefix (default: genius)",
    )
    scan_parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="How long to listen for messages (default: 5)",
    )

    # config command
    config_parser = subparsers.add_parser("config", help="Configuration utilities")
    config_subparsers = config_parser.add_subparsers(dest="config_action", help="Config action")

    # config validate
    validate_parser = config_subparsers.add_parser("validate", help="Validate configuration")
    validate_parser.add_argument(
        "--config-dir",
        type=str,
        help="Path to config directory",
    )

    # config init
    init_parser = config_subparsers.add_parser("init", help="Create example config files")
    init_parser.add_argument(
        "--config-dir",
        type=str,
        default="./config",
        help="Path to config directory (default: ./config)",
    )

    return parser, config_parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser, config_parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "serve":
        from main import main as serve_main

        config_dir = Path(args.config_dir) if args.config_dir else None
        try:
            asyncio.run(serve_main(config_dir))
        except KeyboardInterrupt:
            pass

    elif args.command == "zones":
        asyncio.run(run_zones(args))

    elif args.command == "scan":
        from discovery.mqtt import scan_mqtt

        asyncio.run(
            scan_mqtt(
                host=args.host,
                port=args.port,
                username=args.username,
                password=args.password,
                prefix=args.prefix,
                timeout=args.timeout,
            )
        )

    elif args.command == "config":
        if args.config_action is None:
            config_parser.print_help()
            sys.exit(1)
        run_config_command(args)


async def run_zones(args: argparse.Namespace) -> None:
    """Print the hub's zones."""
    from config import load_settings
    from discovery.zones import list_zones
    from main import create_client

    config_dir = Path(args.config_dir) if args.config_dir else None
    config, secrets = load_settings(config_dir)
    snapshot = await list_zones(create_client(config, secrets), as_json=args.json)
    if snapshot is None:
        sys.exit(1)


def run_config_command(args: argparse.Namespace) -> None:
    """Run config commands."""
    if args.config_action == "validate":
        from discovery.config_utils import validate_config

        if not validate_config(args.config_dir):
            sys.exit(1)

    elif args.config_action == "init":
        from discovery.config_utils import init_config

        init_config(args.config_dir)


if __name__ == "__main__":
    main()
