"""
Resolver Command-Line Entry Point

This script provides the ``dns-resolve`` command for running forward,
raw and reverse lookups against a configured nameserver.
"""

import argparse
import asyncio
import dataclasses
import sys
from typing import List, Optional

import yaml

from dns_resolver.config.loader import ConfigLoader
from dns_resolver.config.schema import ResolverConfig
from dns_resolver.core import DNSMessage, DNSRecordType, ResolverError, create_resolver
from dns_resolver.dns_logging import get_logger, log_exception, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dns-resolve", description="Asynchronous DNS stub resolver"
    )
    parser.add_argument("--config", "-c", help="Configuration file path")
    parser.add_argument("--nameserver", "-s", help="Nameserver to query")
    parser.add_argument("--port", "-p", type=int, help="Nameserver port")
    parser.add_argument("--timeout", "-t", type=float, help="Query timeout in seconds")

    commands = parser.add_subparsers(dest="command", required=True)

    resolve_parser = commands.add_parser("resolve", help="Resolve a name to an address")
    resolve_parser.add_argument("domain")

    lookup_parser = commands.add_parser("lookup", help="Show raw records for a name")
    lookup_parser.add_argument("domain")
    lookup_parser.add_argument(
        "--type",
        "-T",
        dest="qtype",
        default="ANY",
        type=str.upper,
        choices=[t.name for t in DNSRecordType],
        help="Record type (default: ANY)",
    )

    reverse_parser = commands.add_parser("reverse", help="PTR lookup for an IPv4 address")
    reverse_parser.add_argument("ip")

    return parser


def format_message(message: DNSMessage) -> List[str]:
    """Render the answer section as zone-file style lines"""
    lines = []
    for record in message.answers:
        try:
            rtype = DNSRecordType(record.rtype).name
        except ValueError:
            rtype = f"TYPE{record.rtype}"
        lines.append(f"{record.name}\t{record.ttl}\tIN\t{rtype}\t{record.data}")
    return lines


def load_cli_config(args: argparse.Namespace) -> ResolverConfig:
    """Load the configuration file and apply command-line overrides"""
    config = ConfigLoader(args.config).load_config()
    overrides = {
        key: value
        for key, value in (
            ("nameserver", args.nameserver),
            ("port", args.port),
            ("timeout", args.timeout),
        )
        if value is not None
    }
    if overrides:
        config = dataclasses.replace(config, **overrides)
    return config


async def main(argv: Optional[List[str]] = None) -> int:
    """Main function"""
    args = build_parser().parse_args(argv)

    try:
        config = load_cli_config(args)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Failed to load configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging)
    logger = get_logger("dns_resolver.cli")

    resolver = create_resolver(config)
    logger.debug(
        "Resolver configured",
        nameserver=config.nameserver,
        port=config.port,
        timeout=config.timeout,
        retries=config.retries,
    )

    try:
        if args.command == "resolve":
            print(await resolver.resolve(args.domain))
        elif args.command == "lookup":
            message = await resolver.lookup(args.domain, DNSRecordType[args.qtype])
            for line in format_message(message):
                print(line)
        else:
            message = await resolver.reverse(args.ip)
            for line in format_message(message):
                print(line)
    except (ResolverError, ValueError) as e:
        logger.debug(f"{args.command} failed", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        log_exception(logger, f"Unexpected error during {args.command}", e)
        return 1

    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
