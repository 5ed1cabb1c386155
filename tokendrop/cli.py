"""
Command line entry point.

    tokendrop disburse 0xRecipient
    tokendrop networks
"""
import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import TreasuryConfig
from .exceptions import ConfigError
from .networks import NetworkConfig
from .orchestrator import DisbursementOrchestrator
from .version import __version__


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tokendrop",
        description="Disburse ERC-1155 tokens from a treasury, once per address."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    disburse = sub.add_parser("disburse", help="Send the configured amount to one address")
    disburse.add_argument("recipient", help="Recipient address (0x...)")

    sub.add_parser("networks", help="List known networks")
    return parser


def _cmd_disburse(args: argparse.Namespace) -> int:
    try:
        config = TreasuryConfig.from_env()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    result = DisbursementOrchestrator(config).disburse(args.recipient)
    print(json.dumps(result.to_dict(), indent=2))
    return 1 if result.is_error else 0


def _cmd_networks(args: argparse.Namespace) -> int:
    for key, entry in NetworkConfig.load_networks().items():
        print(f"{key:<16} {entry['chainId']:>10}  {entry.get('label', entry['name'])}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    if args.command == "disburse":
        return _cmd_disburse(args)
    return _cmd_networks(args)


if __name__ == "__main__":
    sys.exit(main())
