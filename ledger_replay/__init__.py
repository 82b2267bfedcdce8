"""
ledger_replay - Client Account Ledger Replay

Replays an ordered stream of deposits, withdrawals, disputes, resolves and
chargebacks against client accounts and reports the final balances.

Usage:
    from decimal import Decimal
    from ledger_replay import TransactionEngine, TransactionEvent, TransactionKind

    engine = TransactionEngine()
    engine.apply(TransactionEvent(TransactionKind.DEPOSIT, client_id=1, tx_id=1, amount=Decimal("20")))
    outcome = engine.apply(TransactionEvent(TransactionKind.WITHDRAWAL, client_id=1, tx_id=2, amount=Decimal("50")))
    outcome.reason      # IgnoreReason.INSUFFICIENT_FUNDS

    for snapshot in engine.store.snapshots():
        print(snapshot)

From a CSV file:
    from ledger_replay import TransactionEngine, read_transactions, write_accounts

    engine = TransactionEngine()
    engine.run(read_transactions("transactions.csv"))
    write_accounts(engine.store.snapshots(), sys.stdout)
"""

# Core types
from .core import (
    TransactionEvent,
    TransactionKind,
    Account,
    LedgerEntry,
    AccountSnapshot,
    Outcome,
    ApplyResult,
    IgnoreReason,
    APPLIED,
    LedgerError,
    MalformedRecord,
    MissingAmount,
    InvalidAmount,
    to_amount,
    format_amount,
    AMOUNT_DECIMAL_PLACES,
    MAX_CLIENT_ID,
    MAX_TX_ID,
)

# Storage
from .store import LedgerStore

# State machine
from .engine import TransactionEngine, ReplaySummary

# I/O collaborators
from .ingest import read_transactions, iter_transactions, parse_record
from .report import write_accounts, format_row, REPORT_COLUMNS

__all__ = [
    # Core
    'TransactionEvent', 'TransactionKind', 'Account', 'LedgerEntry', 'AccountSnapshot',
    'Outcome', 'ApplyResult', 'IgnoreReason', 'APPLIED',
    'LedgerError', 'MalformedRecord', 'MissingAmount', 'InvalidAmount',
    'to_amount', 'format_amount',
    'AMOUNT_DECIMAL_PLACES', 'MAX_CLIENT_ID', 'MAX_TX_ID',
    # Storage
    'LedgerStore',
    # State machine
    'TransactionEngine', 'ReplaySummary',
    # I/O
    'read_transactions', 'iter_transactions', 'parse_record',
    'write_accounts', 'format_row', 'REPORT_COLUMNS',
]

__version__ = '1.0.0'
