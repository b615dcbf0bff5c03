#!/usr/bin/env python3
"""
stepchain CLI

Command-line interface for the bundled example chains.

Usage:
    stepchain demo [--delays 0.1 0.01 0.05]
    stepchain fetch <url> [<url> ...] [--timeout 10] [--json]
    stepchain config [--json]
    stepchain version
"""

import argparse
import asyncio
import json
import sys
from dataclasses import asdict

import httpx

from stepchain.core.errors import ChainError


def cmd_demo(args: argparse.Namespace) -> int:
    """Run the timer chain and print the finish order."""
    from stepchain.examples.timer_chain import run_timers

    records = asyncio.run(run_timers(args.delays))

    print(f"\n⏱  Timer chain ({len(records)} steps)\n")
    for record in records:
        print(f"  {record.index}. {record.key}({record.delay}) finished")

    in_order = [r.index for r in records] == list(range(1, len(records) + 1))
    print(f"\n{'✅' if in_order else '❌'} Finished in call order: {in_order}")
    return 0 if in_order else 1


def cmd_fetch(args: argparse.Namespace) -> int:
    """GET the given URLs one after another through the HTTP chain."""
    from stepchain.examples.http_chain import fetch_all

    try:
        results = asyncio.run(fetch_all(args.urls, timeout=args.timeout))
    except (httpx.HTTPError, httpx.InvalidURL, ChainError) as e:
        print(f"\n❌ Request failed: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps([asdict(r) for r in results], indent=2))
        return 0

    print()
    for record in results:
        print(f"  {record.status_code}  {record.method} {record.url}  ({record.elapsed_ms:.0f}ms)")
    print()
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Show the effective configuration."""
    from stepchain.config import get_config

    data = get_config().to_dict()
    if args.json:
        print(json.dumps(data, indent=2))
        return 0

    print("\n⚙️  stepchain configuration\n")
    for section, values in data.items():
        print(f"  [{section}]")
        for key, value in values.items():
            print(f"    {key} = {value}")
    print()
    return 0


def cmd_version(args: argparse.Namespace) -> int:
    """Show version info."""
    from stepchain import __version__

    print(f"stepchain {__version__}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="stepchain",
        description="stepchain CLI - chainable, serialized async steps",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  stepchain demo --delays 0.1 0.01 0.05
  stepchain fetch https://example.com https://example.org
  stepchain config --json
        """,
    )

    parser.add_argument(
        "--version", action="version", version="%(prog)s 0.1.0"
    )
    parser.add_argument(
        "--log-level", "-l", help="Override STEPCHAIN_LOG_LEVEL"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # demo command
    demo_parser = subparsers.add_parser("demo", help="Run the timer chain")
    demo_parser.add_argument(
        "--delays", "-d", type=float, nargs="+", default=[0.1, 0.01, 0.05],
        help="Delay in seconds for each step (default: 0.1 0.01 0.05)"
    )
    demo_parser.set_defaults(func=cmd_demo)

    # fetch command
    fetch_parser = subparsers.add_parser("fetch", help="GET URLs one at a time")
    fetch_parser.add_argument("urls", nargs="+", help="URLs to fetch")
    fetch_parser.add_argument(
        "--timeout", "-t", type=float, default=10.0, help="Request timeout in seconds"
    )
    fetch_parser.add_argument(
        "--json", "-j", action="store_true", help="Output as JSON"
    )
    fetch_parser.set_defaults(func=cmd_fetch)

    # config command
    config_parser = subparsers.add_parser("config", help="Show configuration")
    config_parser.add_argument(
        "--json", "-j", action="store_true", help="Output as JSON"
    )
    config_parser.set_defaults(func=cmd_config)

    # version command
    version_parser = subparsers.add_parser("version", help="Show version info")
    version_parser.set_defaults(func=cmd_version)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    from stepchain.config import get_config

    config = get_config()
    if args.log_level:
        config.logging.level = args.log_level
    config.setup_logging()

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
