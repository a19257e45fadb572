from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from walletroles.app import check_transaction, inspect_wallet, run_reconciliation, serve
from walletroles.config import ConfigurationError, configure_logging
from walletroles.domain.model import is_valid_address
from walletroles.domain.reconciliation import RunStatus

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Cardano wallet verification and role sync")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log at DEBUG level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "serve",
        help="Run role reconciliation now and then on the configured interval",
    )

    reconcile = subparsers.add_parser("reconcile", help="Run one role reconciliation pass")
    reconcile.add_argument(
        "--user",
        dest="users",
        action="append",
        metavar="USER_ID",
        help="Only reconcile this user (repeatable); other snapshots are kept",
    )

    inspect = subparsers.add_parser(
        "inspect-wallet",
        help="Show a wallet's assets and computed labels without changing roles",
    )
    inspect.add_argument("address", type=str, help="Cardano address (addr1...)")

    check = subparsers.add_parser(
        "check-tx",
        help="Check that a wallet took part in a transaction (exit 1 if not)",
    )
    check.add_argument("--wallet", type=str, required=True, help="Cardano address (addr1...)")
    check.add_argument("tx_hash", type=str, help="64-character transaction hash")

    return parser.parse_args(list(argv))


def _validate_args(args: argparse.Namespace) -> None:
    if args.command == "inspect-wallet" and not is_valid_address(args.address):
        raise ValueError(f"Invalid Cardano address: {args.address}")
    if args.command == "check-tx" and not is_valid_address(args.wallet):
        raise ValueError(f"Invalid Cardano address: {args.wallet}")


def _run_command(args: argparse.Namespace) -> int:
    if args.command == "serve":
        asyncio.run(serve())
        return 0

    if args.command == "reconcile":
        report = run_reconciliation(args.users)
        log.info("Reconciliation %s", report.status)
        for entry in report.users:
            log.info(
                "  %s: %s labels=[%s] granted=[%s] revoked=[%s]",
                entry.user_id,
                entry.outcome,
                ", ".join(entry.labels),
                ", ".join(entry.granted),
                ", ".join(entry.revoked),
            )
        return 0 if report.status is RunStatus.COMPLETED else 1

    if args.command == "inspect-wallet":
        records, result = inspect_wallet(args.address)
        log.info("Wallet %s holds %s native assets", args.address, len(records))
        for category, holdings in result.holdings.items():
            log.info("  %s: %s", category, holdings.count)
        log.info("Tier: %s", result.tier)
        log.info("Labels: %s", ", ".join(result.labels) or "(none)")
        return 0

    if args.command == "check-tx":
        outcome = check_transaction(args.wallet, args.tx_hash)
        log.info("Transaction %s: %s", args.tx_hash, outcome.message)
        return 0 if outcome.verified else 1

    raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.debug else logging.INFO)
    try:
        _validate_args(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        exit_code = _run_command(parsed_args)
    except ConfigurationError as exc:
        log.error("Configuration error: %s", exc)  # noqa: TRY400
        sys.exit(1)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)
    if exit_code:
        sys.exit(exit_code)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
