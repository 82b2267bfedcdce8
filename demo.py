#!/usr/bin/env python3
"""
demo.py - Walkthrough: Replaying a Transaction Log Step by Step

Each step applies a few events and shows what happened to the accounts.
Press Enter to advance.

WHAT YOU'LL LEARN:
  1-2: Deposits and withdrawals, insufficient funds
  3-5: Disputes, resolves, chargebacks and account locking
  6:   Replaying a CSV file and printing the report

Run:
    python demo.py           # Interactive mode (press Enter for each step)
    python demo.py --quick   # Run all steps without pausing
"""

from decimal import Decimal
from pathlib import Path
import sys

from ledger_replay import (
    TransactionEngine, TransactionEvent, TransactionKind,
    read_transactions, write_accounts,
)


SAMPLE_FILE = Path(__file__).parent / "examples" / "transactions.csv"

QUICK_MODE = "--quick" in sys.argv


def wait_for_enter():
    """Pause for user input unless in quick mode."""
    if not QUICK_MODE:
        input("\n[Press Enter to continue...]")


def step_header(number: int, title: str, objective: str):
    print(f"\n{'='*70}")
    print(f"STEP {number}: {title}")
    print(f"{'='*70}")
    print(f"\nObjective: {objective}\n")


def show(engine: TransactionEngine, client_id: int):
    account = engine.store.get_account(client_id)
    if account is None:
        print(f"  client {client_id}: no account")
        return
    print(f"  client {client_id}: available={account.available} held={account.held} "
          f"total={account.total} locked={account.locked}")


def apply(engine: TransactionEngine, kind: TransactionKind, client: int, tx: int, amount=None):
    event = TransactionEvent(kind, client, tx, Decimal(amount) if amount is not None else None)
    print(f">>> engine.apply({event!r})")
    outcome = engine.apply(event)
    print(f"    {outcome!r}")
    return outcome


def step_01_deposits(engine: TransactionEngine):
    step_header(1, "Deposits",
        "A deposit to an unseen client creates the account.")
    apply(engine, TransactionKind.DEPOSIT, 1, 1, "20")
    apply(engine, TransactionKind.DEPOSIT, 1, 2, "30.5")
    show(engine, 1)
    wait_for_enter()


def step_02_withdrawals(engine: TransactionEngine):
    step_header(2, "Withdrawals",
        "Withdrawals need enough available funds; otherwise they are ignored.")
    apply(engine, TransactionKind.WITHDRAWAL, 1, 3, "10")
    apply(engine, TransactionKind.WITHDRAWAL, 1, 4, "500")
    apply(engine, TransactionKind.WITHDRAWAL, 9, 5, "1")
    show(engine, 1)
    show(engine, 9)
    wait_for_enter()


def step_03_dispute(engine: TransactionEngine):
    step_header(3, "Disputes",
        "A dispute moves the referenced amount from available to held.")
    apply(engine, TransactionKind.DISPUTE, 1, 1)
    show(engine, 1)
    print("\nDisputing the same transaction twice does nothing:")
    apply(engine, TransactionKind.DISPUTE, 1, 1)
    wait_for_enter()


def step_04_resolve(engine: TransactionEngine):
    step_header(4, "Resolves",
        "A resolve releases held funds back to available.")
    apply(engine, TransactionKind.RESOLVE, 1, 1)
    show(engine, 1)
    wait_for_enter()


def step_05_chargeback(engine: TransactionEngine):
    step_header(5, "Chargebacks",
        "A chargeback removes held funds and locks the account for good.")
    apply(engine, TransactionKind.DISPUTE, 1, 2)
    apply(engine, TransactionKind.CHARGEBACK, 1, 2)
    show(engine, 1)
    print("\nA locked account ignores everything afterwards:")
    apply(engine, TransactionKind.DEPOSIT, 1, 6, "100")
    show(engine, 1)

    summary = engine.summary
    print(f"\n{summary.applied} applied, {summary.ignored} ignored:")
    for reason, count in sorted(summary.ignored_by_reason.items(), key=lambda kv: kv[0].value):
        print(f"  {reason.value}: {count}")
    wait_for_enter()


def step_06_csv():
    step_header(6, "Replaying a CSV File",
        "read_transactions() feeds the engine; write_accounts() prints the report.")
    print(f">>> engine.run(read_transactions({SAMPLE_FILE.name!r}))")
    engine = TransactionEngine()
    engine.run(read_transactions(SAMPLE_FILE))
    print(">>> write_accounts(engine.store.snapshots(), sys.stdout)\n")
    write_accounts(engine.store.snapshots(), sys.stdout)


def main():
    engine = TransactionEngine()
    step_01_deposits(engine)
    step_02_withdrawals(engine)
    step_03_dispute(engine)
    step_04_resolve(engine)
    step_05_chargeback(engine)
    step_06_csv()


if __name__ == "__main__":
    main()
