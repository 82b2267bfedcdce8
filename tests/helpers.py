"""
helpers.py - Event factories and seeding helpers shared by the test suites.
"""

from decimal import Decimal
from typing import Optional

from ledger_replay import (
    Account, LedgerStore, TransactionEngine,
    TransactionEvent, TransactionKind,
)


def deposit(client: int, tx: int, amount) -> TransactionEvent:
    return TransactionEvent(TransactionKind.DEPOSIT, client, tx, Decimal(str(amount)))


def withdrawal(client: int, tx: int, amount) -> TransactionEvent:
    return TransactionEvent(TransactionKind.WITHDRAWAL, client, tx, Decimal(str(amount)))


def dispute(client: int, tx: int) -> TransactionEvent:
    return TransactionEvent(TransactionKind.DISPUTE, client, tx)


def resolve(client: int, tx: int) -> TransactionEvent:
    return TransactionEvent(TransactionKind.RESOLVE, client, tx)


def chargeback(client: int, tx: int) -> TransactionEvent:
    return TransactionEvent(TransactionKind.CHARGEBACK, client, tx)


def seed_account(
    store: LedgerStore,
    client: int,
    available="0",
    held="0",
    total: Optional[str] = None,
    locked: bool = False,
) -> Account:
    """
    Insert an account with the given balances directly into the store.

    Bypasses the engine, for setting up a starting state. ``total`` defaults
    to available + held.
    """
    available = Decimal(str(available))
    held = Decimal(str(held))
    total = Decimal(str(total)) if total is not None else available + held
    account = Account(client_id=client, available=available, held=held, total=total, locked=locked)
    store.accounts[client] = account
    return account


def balances(engine: TransactionEngine, client: int):
    """Return (available, held, total, locked) for a client."""
    account = engine.store.get_account(client)
    assert account is not None, f"client {client} has no account"
    return account.available, account.held, account.total, account.locked
