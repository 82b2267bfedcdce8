"""
cli.py - Command-line entry point

    ledger-replay transactions.csv > accounts.csv
    python -m ledger_replay -v transactions.csv

The whole input is replayed before anything is written, so a malformed
record leaves stdout empty.
"""

from __future__ import annotations
from typing import List, Optional, TextIO
import argparse
import sys

from . import __version__
from .core import LedgerError
from .engine import TransactionEngine
from .ingest import read_transactions
from .report import write_accounts


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ledger-replay",
        description="Replay a CSV transaction log and print final client balances as CSV.",
    )
    parser.add_argument("input", help="path to the transactions CSV file")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="print one line per applied or ignored transaction to stderr",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(
    argv: Optional[List[str]] = None,
    stdout: Optional[TextIO] = None,
    stderr: Optional[TextIO] = None,
) -> int:
    """
    Run a replay.

    Returns:
        0 on success, 1 if the input could not be read or parsed
    """
    args = build_parser().parse_args(argv)
    stdout = stdout if stdout is not None else sys.stdout
    stderr = stderr if stderr is not None else sys.stderr

    engine = TransactionEngine(verbose=args.verbose, output=stderr)
    try:
        summary = engine.run(read_transactions(args.input))
    except LedgerError as e:
        print(f"error: {args.input}: {e}", file=stderr)
        return 1
    except OSError as e:
        print(f"error: cannot read {args.input}: {e.strerror or e}", file=stderr)
        return 1

    write_accounts(engine.store.snapshots(), stdout)
    if args.verbose:
        print(
            f"processed {summary.processed} transaction(s): "
            f"{summary.applied} applied, {summary.ignored} ignored",
            file=stderr,
        )
    return 0
