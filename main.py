# main.py

"""Entry point for the chain_tracker service (HTTP server or headless CLI)."""

import argparse
import asyncio
import logging
import sys

from chain_tracker.config.logging_config import setup_logging
from chain_tracker.config.settings import Settings

logger = logging.getLogger("chain_tracker.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="chain_tracker",
        description="Base and Solana wallet balance tracker.",
        epilog=(
            f"Records a snapshot every {Settings.RECORD_INTERVAL_MINUTES} "
            "minutes while serving."
        ),
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--record-once",
        action="store_true",
        default=False,
        dest="record_once",
        help="Record a single snapshot and exit.",
    )
    mode.add_argument(
        "--stats",
        action="store_true",
        default=False,
        help="Print live balances with change since tracking began.",
    )
    mode.add_argument(
        "--history",
        nargs="?",
        const=Settings.DEFAULT_HISTORY_HOURS,
        default=None,
        metavar="HOURS",
        help=(
            "Print snapshots from the last HOURS "
            f"(default: {Settings.DEFAULT_HISTORY_HOURS})."
        ),
    )
    mode.add_argument(
        "--activity",
        action="store_true",
        default=False,
        help="Print snapshot counts and 7-day average balances.",
    )
    mode.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Run a connectivity health check on both RPC endpoints.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format for views (default: json).",
    )
    parser.add_argument(
        "--db",
        default=None,
        dest="db_path",
        help=f"Snapshot database path (default: {Settings.DB_PATH}).",
    )
    return parser


def _dispatch(args: argparse.Namespace) -> int:
    """Build the shared context and run the selected command."""
    from chain_tracker.cli import runner
    from chain_tracker.context import AppContext

    context = AppContext.create(db_path=args.db_path)
    try:
        if args.record_once:
            return asyncio.run(runner.run_record_once(context))
        if args.stats:
            return asyncio.run(
                runner.run_stats(context, args.output_format)
            )
        if args.history is not None:
            return runner.run_history(
                context, args.history, args.output_format,
            )
        if args.activity:
            return runner.run_activity(context, args.output_format)
        if args.health:
            return asyncio.run(runner.run_health_check(context))
        return runner.run_server(context)
    except Exception:
        logger.critical("Fatal error", exc_info=True)
        raise
    finally:
        context.close()
        logger.info("chain_tracker shutting down")


def _command_name(args: argparse.Namespace) -> str:
    """Short name of the selected command, used for the log file."""
    if args.record_once:
        return "record"
    if args.stats:
        return "stats"
    if args.history is not None:
        return "history"
    if args.activity:
        return "activity"
    if args.health:
        return "health"
    return "server"


def main() -> None:
    """Serve by default; run a one-shot command when one is given."""
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(_command_name(args))
    logger.info("chain_tracker starting, log file: %s", log_file)
    sys.exit(_dispatch(args))


if __name__ == "__main__":
    main()
